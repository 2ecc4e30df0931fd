from fastapi import APIRouter, Body

from riskline.connectors.rest_push_receive import receive_payload
from riskline.transforms.alerts import aggregate_alerts, format_patient_id, score_patients

router = APIRouter()


@router.post("/alerts/preview")
def preview_alerts(payload: dict | list = Body(...)) -> dict:
    """원격 API 호출 없이 환자 레코드를 점수화

    Args:
        payload: 단일 환자 레코드 또는 레코드 목록

    Returns:
        알림 페이로드와 환자별 프로파일
    """
    records = receive_payload(payload)
    profiles = score_patients(records)
    alerts = aggregate_alerts(profiles)
    return {
        "alerts": alerts.model_dump(),
        "profiles": [
            {**profile.model_dump(), "patient_id": format_patient_id(profile.patient_id)}
            for profile in profiles
        ],
    }
