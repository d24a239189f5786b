# hrms/core/logging_utils.py

"""
애플리케이션 로깅 설정 모듈입니다.

각 모듈은 `logging.getLogger(__name__)`으로 로거를 얻고,
애플리케이션 시작 시 `setup_logging()`을 한 번 호출하여 루트 핸들러를 구성합니다.
`LOG_JSON=true`이면 한 줄에 하나의 JSON 객체를 출력합니다 (로그 수집기용).
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from hrms.core.config import settings

# LogRecord 기본 속성: extra= 로 전달된 키만 JSON 페이로드에 포함시키기 위해 제외합니다.
_RESERVED_LOG_RECORD_FIELDS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "taskName", "message",
}

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_LOG_RECORD_FIELDS or key.startswith("_"):
                continue
            payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    루트 로거에 스트림 핸들러를 (재)설치합니다.
    인자를 생략하면 settings.LOG_LEVEL / settings.LOG_JSON 값을 사용합니다.
    """
    level = (level or settings.LOG_LEVEL).upper()
    json_output = settings.LOG_JSON if json_output is None else json_output

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(TEXT_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # SQL 출력은 DEBUG_MODE에서 엔진의 echo 옵션으로만 제어합니다.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
