from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from riskline.core.errors import PipelineError
from riskline.core.pipeline import run_assessment
from riskline.core.status import RunStatusStore

router = APIRouter()


@router.post("/run")
def run_assessment_endpoint() -> JSONResponse:
    """평가 파이프라인을 실행

    Returns:
        실행 결과 또는 실패 상세
    """
    try:
        result = run_assessment()
    except PipelineError as exc:
        return JSONResponse(
            status_code=500,
            content={
                "error": "평가 실행을 완료하지 못함",
                "code": exc.code,
                "detail": exc.message,
            },
        )
    return JSONResponse(
        content={
            "message": "평가 파이프라인 완료",
            "run_id": result.run_id,
            "patientCount": result.patient_count,
            "submission": result.submission,
        }
    )


@router.get("/status")
def assessment_status() -> dict:
    """최근 평가 실행 상태를 반환

    Returns:
        상태 레코드
    """
    status = RunStatusStore().query_status()
    if not status:
        return {"last_status": "실행 이력 없음"}
    return status
