from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, TypeVar

import httpx

from riskline.core.config import ClientConfig
from riskline.utils.parsing import parse_number

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRY_AFTER_BODY_FIELDS = (
    "retry_after",
    "retryAfter",
    "retry_after_seconds",
    "retryAfterSeconds",
)
MAX_RETRY_AFTER_SECONDS = 3600
JITTER_MS = 200

Classifier = Callable[[Exception], bool]
DelayStrategy = Callable[[Exception, int], float]


def error_status(error: Exception) -> int | None:
    """예외에 포함된 HTTP 상태 코드

    Args:
        error: 발생한 예외

    Returns:
        상태 코드 또는 None(네트워크 오류)
    """
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


def is_retryable_error(error: Exception) -> bool:
    """재시도 가능 여부 판정

    상태 코드가 없는 오류, 429, 5xx만 재시도한다.

    Args:
        error: 발생한 예외

    Returns:
        재시도 가능 여부
    """
    status = error_status(error)
    if status is None:
        return True
    return status == 429 or 500 <= status < 600


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def retry_after_seconds(response: httpx.Response) -> float | None:
    """서버가 지정한 재시도 대기 시간(초)

    헤더를 먼저 확인하고, 없으면 본문 필드를 확인한다.

    Args:
        response: 429 응답

    Returns:
        (0, 3600] 범위의 초 또는 None
    """
    declared: object = response.headers.get("retry-after")
    if not declared:
        body = _response_body(response)
        if isinstance(body, dict):
            declared = next(
                (body[key] for key in RETRY_AFTER_BODY_FIELDS if body.get(key)),
                None,
            )
    seconds = parse_number(declared)
    if seconds is None or not 0 < seconds <= MAX_RETRY_AFTER_SECONDS:
        return None
    return seconds


def rate_limit_delay(error: Exception, attempt: int, config: ClientConfig) -> float:
    """429 응답의 대기 시간(밀리초)

    Args:
        error: 429 상태 예외
        attempt: 실패 횟수(1부터)
        config: 클라이언트 설정

    Returns:
        대기 시간(밀리초)
    """
    if isinstance(error, httpx.HTTPStatusError):
        seconds = retry_after_seconds(error.response)
        if seconds is not None:
            return seconds * 1000
    return min(config.retry_max_delay_ms, config.rate_limit_delay_ms * attempt)


def exponential_delay(
    attempt: int,
    config: ClientConfig,
    jitter: Callable[[], float] = random.random,
) -> float:
    """지수 백오프 대기 시간(밀리초)

    Args:
        attempt: 실패 횟수(1부터)
        config: 클라이언트 설정
        jitter: [0, 1) 난수 함수

    Returns:
        대기 시간(밀리초)
    """
    backoff = min(
        config.retry_max_delay_ms, config.retry_base_delay_ms * 2 ** (attempt - 1)
    )
    return min(config.retry_max_delay_ms, backoff + jitter() * JITTER_MS)


def backoff_strategy(config: ClientConfig) -> DelayStrategy:
    """상태 코드에 따라 대기 전략을 선택하는 함수 생성

    Args:
        config: 클라이언트 설정

    Returns:
        (예외, 실패 횟수) -> 대기 시간(밀리초)
    """

    def _delay(error: Exception, attempt: int) -> float:
        if error_status(error) == 429:
            return rate_limit_delay(error, attempt, config)
        return exponential_delay(attempt, config)

    return _delay


def describe_error(error: Exception) -> str:
    status = error_status(error)
    return f"{error} ({status if status is not None else 'unknown'})"


def call_with_retry(
    func: Callable[[], T],
    label: str,
    max_attempts: int,
    delay: DelayStrategy,
    is_retryable: Classifier = is_retryable_error,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """재시도 정책으로 호출 실행

    Args:
        func: 호출할 함수
        label: 로그용 호출 이름
        max_attempts: 최대 시도 횟수
        delay: 대기 전략(밀리초 반환)
        is_retryable: 재시도 가능 판정 함수
        sleep: 대기 함수(초 단위)

    Returns:
        호출 결과

    Raises:
        Exception: 재시도 불가 오류 또는 시도 횟수 초과 시 마지막 오류
    """
    attempt = 0
    while True:
        try:
            return func()
        except Exception as exc:
            attempt += 1
            if attempt >= max_attempts or not is_retryable(exc):
                logger.error(
                    "%s 실패 (시도 %d/%d): %s",
                    label,
                    attempt,
                    max_attempts,
                    describe_error(exc),
                )
                raise
            wait_ms = delay(exc, attempt)
            logger.warning(
                "%s 재시도 대기 %.0fms (시도 %d/%d): %s",
                label,
                wait_ms,
                attempt,
                max_attempts,
                describe_error(exc),
            )
            sleep(wait_ms / 1000)
