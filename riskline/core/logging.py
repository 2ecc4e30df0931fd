import logging

# 파이프라인 로그 레코드의 extra 필드와 기본값
CONTEXT_DEFAULTS = {"event": "system", "run_id": "-", "stage": "-"}


class _SafeFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        for field, default in CONTEXT_DEFAULTS.items():
            if not hasattr(record, field):
                setattr(record, field, default)
        return super().format(record)


def configure_logging(level: str) -> None:
    """애플리케이션 로깅을 설정

    httpx 요청 로그는 DEBUG 레벨에서만 출력한다.

    Args:
        level: 로깅 레벨 문자열
    """
    handler = logging.StreamHandler()
    handler.setFormatter(
        _SafeFormatter(
            "%(asctime)s %(levelname)s %(name)s "
            "event=%(event)s run_id=%(run_id)s "
            "stage=%(stage)s %(message)s"
        )
    )

    logging.basicConfig(level=level.upper(), handlers=[handler])
    if level.upper() != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
