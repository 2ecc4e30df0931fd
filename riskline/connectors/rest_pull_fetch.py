from __future__ import annotations

import logging
import time
from typing import Any, Callable

import httpx
from pydantic import BaseModel

from riskline.clients.session import decode_body
from riskline.core.config import ClientConfig
from riskline.core.retry import backoff_strategy, call_with_retry

logger = logging.getLogger(__name__)

# 서버 보고 페이지를 신뢰하는 로컬 페이지와의 최대 차이
PAGE_DRIFT_TOLERANCE = 2

Extractor = Callable[[Any], list | None]


class PaginationState(BaseModel):
    """페이지 순회 커서"""

    page: int = 1
    has_next: bool = True
    remaining: int


def _from_data_field(body: Any) -> list | None:
    if isinstance(body, dict) and isinstance(body.get("data"), list):
        return body["data"]
    return None


def _from_bare_list(body: Any) -> list | None:
    return body if isinstance(body, list) else None


def _from_named_field(body: Any) -> list | None:
    if not isinstance(body, dict):
        return None
    for key in ("patients", "results"):
        if isinstance(body.get(key), list):
            return body[key]
    return None


PAGE_EXTRACTORS: tuple[Extractor, ...] = (
    _from_data_field,
    _from_bare_list,
    _from_named_field,
)


def extract_page(body: Any) -> list:
    """응답 본문에서 환자 목록 추출

    Args:
        body: 디코딩된 응답 본문

    Returns:
        환자 레코드 목록(형식 불일치 시 빈 목록)
    """
    for extractor in PAGE_EXTRACTORS:
        records = extractor(body)
        if records is not None:
            return records
    logger.warning("알 수 없는 응답 형식: %s", type(body).__name__)
    return []


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value if isinstance(value, int) else None


def next_state(
    state: PaginationState, body: Any, record_count: int, limit: int
) -> PaginationState:
    """페이지 응답으로 다음 커서 계산

    Args:
        state: 현재 커서
        body: 디코딩된 응답 본문
        record_count: 이번 페이지 레코드 수
        limit: 페이지 크기

    Returns:
        다음 커서
    """
    pagination = body.get("pagination") if isinstance(body, dict) else None
    if not isinstance(pagination, dict):
        pagination = {}

    reported_page = _as_int(pagination.get("page"))
    current_page = state.page
    if (
        reported_page is not None
        and abs(reported_page - state.page) <= PAGE_DRIFT_TOLERANCE
    ):
        current_page = reported_page

    total_pages = _as_int(pagination.get("totalPages"))
    more_by_pagination = pagination.get("hasNext") is True or (
        total_pages is not None and current_page < total_pages
    )
    more_by_count = record_count >= limit

    return PaginationState(
        page=max(current_page + 1, state.page + 1),
        has_next=more_by_pagination or more_by_count,
        remaining=state.remaining - 1,
    )


def fetch_all_patients(
    client: httpx.Client,
    config: ClientConfig,
    limit: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[dict]:
    """원격 API에서 전체 환자 레코드를 순차 조회

    Args:
        client: HTTP 클라이언트
        config: 클라이언트 설정
        limit: 페이지 크기(기본값은 설정값)
        sleep: 대기 함수(초 단위)

    Returns:
        원본 환자 레코드 목록
    """
    limit = limit or config.page_limit
    delay = backoff_strategy(config)
    patients: list = []
    state = PaginationState(remaining=config.max_pages)

    while state.has_next:
        if state.remaining <= 0:
            logger.warning("최대 페이지 수(%d) 도달, 조회 중단", config.max_pages)
            break
        page = state.page

        def _get_page() -> httpx.Response:
            response = client.get("/patients", params={"page": page, "limit": limit})
            response.raise_for_status()
            return response

        response = call_with_retry(
            _get_page,
            f"GET /patients?page={page}&limit={limit}",
            config.max_retries,
            delay,
            sleep=sleep,
        )
        body = decode_body(response)
        records = extract_page(body)
        patients.extend(records)
        state = next_state(state, body, len(records), limit)
        logger.debug(
            "페이지 %d 조회: %d건, 다음 페이지 %s", page, len(records), state.has_next
        )

        if state.has_next:
            sleep(config.page_request_delay_ms / 1000)
    return patients
