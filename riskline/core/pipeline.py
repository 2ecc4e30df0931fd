from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from typing import Callable

import httpx

from riskline.clients.backend_api import submit_assessment
from riskline.clients.session import build_client
from riskline.connectors.rest_pull_fetch import fetch_all_patients
from riskline.core.config import AppConfig, Settings, get_settings, load_app_config
from riskline.core.errors import AssessmentError, PipelineError
from riskline.core.logger import log_event
from riskline.core.status import RunStatusStore
from riskline.models.alerts import AlertsPayload, AssessmentRunResult
from riskline.transforms.alerts import build_alerts

PREVIEW_SIZE = 5


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _elapsed_ms(start: datetime) -> int:
    return int((datetime.now(timezone.utc) - start).total_seconds() * 1000)


def _preview(ids: list[str]) -> str:
    text = ", ".join(ids[:PREVIEW_SIZE])
    return f"{text}..." if len(ids) > PREVIEW_SIZE else text


def _log_alerts(run_id: str, alerts: AlertsPayload) -> None:
    log_event(
        "scoring_complete",
        "INFO",
        run_id,
        "score",
        f"고위험 {len(alerts.high_risk_patients)}명, "
        f"발열 {len(alerts.fever_patients)}명, "
        f"데이터 품질 문제 {len(alerts.data_quality_issues)}명",
    )
    log_event(
        "scoring_preview",
        "DEBUG",
        run_id,
        "score",
        f"high_risk=[{_preview(alerts.high_risk_patients)}] "
        f"fever=[{_preview(alerts.fever_patients)}] "
        f"data_quality=[{_preview(alerts.data_quality_issues)}]",
    )


def run_assessment(
    settings: Settings | None = None,
    config: AppConfig | None = None,
    transport: httpx.BaseTransport | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> AssessmentRunResult:
    """평가 파이프라인을 실행

    조회, 점수화, 제출을 순서대로 수행하며 실패 시 제출하지 않는다.

    Args:
        settings: 애플리케이션 설정(기본값은 환경 변수)
        config: 실행 설정(기본값은 설정 파일)
        transport: 테스트용 전송 계층(선택)
        sleep: 대기 함수(초 단위)

    Returns:
        실행 결과

    Raises:
        AssessmentError: 조회 또는 제출 실패 시
    """
    settings = settings or get_settings()
    config = config or load_app_config()
    run_id = uuid.uuid4().hex[:12]
    start = datetime.now(timezone.utc)
    store = RunStatusStore()
    log_event("pipeline_start", "INFO", run_id, "fetch", "평가 시작")

    try:
        with build_client(settings, config.client, transport=transport) as client:
            try:
                patients = fetch_all_patients(client, config.client, sleep=sleep)
            except Exception as exc:
                raise AssessmentError(
                    "PIPE_FETCH_001", "fetch", str(exc) or type(exc).__name__
                ) from exc
            log_event(
                "fetch_complete",
                "INFO",
                run_id,
                "fetch",
                "환자 조회 완료",
                record_count=len(patients),
                duration_ms=_elapsed_ms(start),
            )

            alerts = build_alerts(patients)
            _log_alerts(run_id, alerts)

            try:
                submission = submit_assessment(
                    client, alerts, config.client, sleep=sleep
                )
            except Exception as exc:
                raise AssessmentError(
                    "PIPE_SUBMIT_001", "submit", str(exc) or type(exc).__name__
                ) from exc
            log_event("submit_complete", "INFO", run_id, "submit", "평가 제출 완료")
    except AssessmentError as exc:
        log_event(
            "pipeline_failed",
            "ERROR",
            run_id,
            exc.stage,
            exc.message,
            error_code=exc.code,
            duration_ms=_elapsed_ms(start),
        )
        store.update_status(
            {
                "run_id": run_id,
                "last_run_at": _now(),
                "last_success_at": None,
                "last_status": "실패",
                "last_error_code": exc.code,
                "patient_count": None,
            }
        )
        raise

    log_event(
        "pipeline_complete",
        "INFO",
        run_id,
        "submit",
        "파이프라인 완료",
        record_count=len(patients),
        duration_ms=_elapsed_ms(start),
    )
    finished_at = _now()
    store.update_status(
        {
            "run_id": run_id,
            "last_run_at": finished_at,
            "last_success_at": finished_at,
            "last_status": "성공",
            "last_error_code": None,
            "patient_count": len(patients),
        }
    )
    return AssessmentRunResult(
        run_id=run_id,
        alerts=alerts,
        patient_count=len(patients),
        submission=submission,
    )


def run_scheduled_assessment() -> None:
    """스케줄러 작업으로 평가를 실행

    실패는 run_assessment에서 이미 기록되므로 다시 올리지 않는다.
    """
    try:
        run_assessment()
    except PipelineError:
        return
