from __future__ import annotations

import math

INVALID_TOKENS = frozenset(
    {"", "null", "undefined", "n/a", "na", "invalid", "temp_error", "error"}
)


def parse_number(value: object) -> float | None:
    """값을 유한한 실수로 파싱

    숫자로 해석할 수 없는 입력(빈 값, 센티널 문자열, 부분 파싱)은
    모두 None으로 취급한다.

    Args:
        value: 원본 값

    Returns:
        파싱된 실수 또는 None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.lower() in INVALID_TOKENS:
        return None
    # float()는 "1_000" 같은 자릿수 구분자를 허용함
    if "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None
