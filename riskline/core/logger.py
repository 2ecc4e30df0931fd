from __future__ import annotations

import logging


def log_event(
    event: str,
    level: str,
    run_id: str,
    stage: str,
    message: str,
    error_code: str | None = None,
    duration_ms: int | None = None,
    record_count: int | None = None,
) -> None:
    """파이프라인 이벤트를 표준 로깅으로 기록

    Args:
        event: 이벤트 이름
        level: 로깅 레벨 문자열
        run_id: 실행 식별자
        stage: 파이프라인 단계
        message: 로그 메시지
        error_code: 에러 코드(선택)
        duration_ms: 처리 시간(밀리초, 선택)
        record_count: 레코드 수(선택)
    """
    logger = logging.getLogger("riskline")
    extra = {
        "event": event,
        "run_id": run_id,
        "stage": stage,
    }
    metrics = {
        "error_code": error_code,
        "duration_ms": duration_ms,
        "record_count": record_count,
    }
    suffix = " ".join(f"{key}={value}" for key, value in metrics.items() if value is not None)
    if suffix:
        message = f"{message} {suffix}"
    logger.log(getattr(logging, level.upper(), logging.INFO), message, extra=extra)
