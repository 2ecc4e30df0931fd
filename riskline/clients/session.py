from __future__ import annotations

import logging
from typing import Any

import httpx

from riskline.core.config import ClientConfig, Settings

logger = logging.getLogger(__name__)


def build_client(
    settings: Settings,
    config: ClientConfig,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """원격 환자 API용 HTTP 클라이언트 생성

    Args:
        settings: 애플리케이션 설정
        config: 클라이언트 설정
        transport: 테스트용 전송 계층(선택)

    Returns:
        httpx 클라이언트
    """
    if not settings.api_key:
        logger.warning("API 키가 비어 있음: API_KEY 환경 변수로 x-api-key를 지정하세요")
    headers = {
        "Content-Type": "application/json",
        "x-api-key": settings.api_key,
        "User-Agent": f"riskline/{settings.version}",
    }
    return httpx.Client(
        base_url=settings.api_base_url.rstrip("/"),
        headers=headers,
        timeout=config.request_timeout_seconds,
        transport=transport,
    )


def decode_body(response: httpx.Response) -> Any:
    """응답 본문을 디코딩

    JSON이 아니면 원문 텍스트를 그대로 반환한다.

    Args:
        response: HTTP 응답

    Returns:
        디코딩된 JSON 값 또는 텍스트
    """
    try:
        return response.json()
    except ValueError:
        return response.text
