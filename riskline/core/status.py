from __future__ import annotations

import threading


class RunStatusStore:
    """최근 평가 실행 상태를 보관하는 프로세스 메모리 저장소"""

    _instance: "RunStatusStore | None" = None

    def __new__(cls) -> "RunStatusStore":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init_store()
        return cls._instance

    def _init_store(self) -> None:
        self._lock = threading.Lock()
        self._status: dict = {}

    def update_status(self, status: dict) -> None:
        """실행 상태를 갱신

        이전 성공 시각은 실패 실행에서도 유지한다.

        Args:
            status: 상태 레코드 딕셔너리
        """
        with self._lock:
            merged = dict(status)
            if merged.get("last_success_at") is None:
                merged["last_success_at"] = self._status.get("last_success_at")
            self._status = merged

    def query_status(self) -> dict:
        """최근 실행 상태를 조회

        Returns:
            상태 레코드(실행 이력이 없으면 빈 딕셔너리)
        """
        with self._lock:
            return dict(self._status)

    def reset(self) -> None:
        """상태를 초기화"""
        with self._lock:
            self._status = {}
