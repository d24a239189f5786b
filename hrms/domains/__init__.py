# hrms/domains/__init__.py
