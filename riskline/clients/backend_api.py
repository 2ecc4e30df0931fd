from __future__ import annotations

import time
from typing import Any, Callable

import httpx

from riskline.clients.session import decode_body
from riskline.core.config import ClientConfig
from riskline.core.retry import backoff_strategy, call_with_retry
from riskline.models.alerts import AlertsPayload


def submit_assessment(
    client: httpx.Client,
    payload: AlertsPayload,
    config: ClientConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """평가 결과를 원격 API로 제출

    Args:
        client: HTTP 클라이언트
        payload: 알림 페이로드
        config: 클라이언트 설정
        sleep: 대기 함수(초 단위)

    Returns:
        원격 API 응답 본문
    """

    def _post() -> httpx.Response:
        response = client.post("/submit-assessment", json=payload.model_dump())
        response.raise_for_status()
        return response

    response = call_with_retry(
        _post,
        "POST /submit-assessment",
        config.max_retries,
        backoff_strategy(config),
        sleep=sleep,
    )
    return decode_body(response)
