from __future__ import annotations


def receive_payload(payload: dict | list) -> list:
    """미리보기 요청 본문을 레코드 목록으로 정규화

    Args:
        payload: 단일 레코드 또는 레코드 목록

    Returns:
        원본 레코드 목록
    """
    if isinstance(payload, list):
        return payload
    return [payload]
