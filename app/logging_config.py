# 구조화 로깅: 운영은 JSON, 로컬은 사람이 읽는 형식

import json
import logging
import os
from datetime import datetime, timezone

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")  # json | text

# extra= 로 넘긴 필드 중 JSON 출력에 포함할 키
_EXTRA_FIELDS = ("moment_id", "match_id", "user_id", "status", "purged", "path")


def _record_time(record: logging.LogRecord) -> str:
    # 출력 시각이 아니라 레코드 생성 시각
    return datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()


class JSONFormatter(logging.Formatter):
    """레코드 하나 = JSON 한 줄. 값이 None 인 extra 필드는 생략."""

    def format(self, record: logging.LogRecord) -> str:
        payload = dict(
            timestamp=_record_time(record),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )
        payload.update(
            (key, getattr(record, key)) for key in _EXTRA_FIELDS if getattr(record, key, None) is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = LOG_LEVEL, fmt: str = LOG_FORMAT) -> None:
    """앱 기동 시 한 번 호출. 중복 호출 시 핸들러를 다시 붙이지 않는다."""
    root = logging.getLogger()
    if any(getattr(h, "_vibelink", False) for h in root.handlers):
        root.setLevel(getattr(logging, level.upper(), logging.INFO))
        return
    handler = logging.StreamHandler()
    handler._vibelink = True  # type: ignore[attr-defined]
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
