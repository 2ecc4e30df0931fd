from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping

from riskline.models.alerts import AlertsPayload, RiskProfile
from riskline.models.patient import PatientRecord
from riskline.transforms.scoring import FEVER_THRESHOLD, build_risk_profile

logger = logging.getLogger(__name__)

HIGH_RISK_THRESHOLD = 4
NEAR_FEVER_FLOOR = 99.0


def _reject_reason(patient_id: object) -> str | None:
    """환자 식별자 거부 사유

    Args:
        patient_id: 원본 식별자

    Returns:
        거부 사유 또는 None(사용 가능)
    """
    if patient_id is None:
        return "식별자 없음"
    if isinstance(patient_id, bool):
        return None if patient_id else "불리언 false 식별자"
    if isinstance(patient_id, str):
        return None if patient_id.strip() else "빈 문자열 식별자"
    if isinstance(patient_id, (int, float)):
        if isinstance(patient_id, float) and not math.isfinite(patient_id):
            return f"유한하지 않은 숫자 식별자({patient_id})"
        if patient_id < 0:
            return f"음수 식별자({patient_id})"
        return None
    return f"지원하지 않는 식별자 타입({type(patient_id).__name__})"


def format_patient_id(patient_id: object) -> str:
    """식별자를 제출용 문자열로 변환

    Args:
        patient_id: 검증된 식별자

    Returns:
        식별자 문자열
    """
    if isinstance(patient_id, bool):
        return "true" if patient_id else "false"
    if isinstance(patient_id, float) and patient_id.is_integer():
        return str(int(patient_id))
    return str(patient_id)


def score_patients(patients: Iterable[object]) -> list[RiskProfile]:
    """식별자가 유효한 환자만 프로파일 생성

    Args:
        patients: 원본 환자 레코드 목록

    Returns:
        위험 프로파일 목록
    """
    profiles: list[RiskProfile] = []
    for raw in patients:
        if not isinstance(raw, Mapping):
            logger.warning("환자 레코드 건너뜀: 객체가 아님 (%r)", raw)
            continue
        reason = _reject_reason(raw.get("patient_id"))
        if reason is not None:
            logger.warning("환자 레코드 건너뜀: %s (%r)", reason, raw)
            continue
        profiles.append(build_risk_profile(PatientRecord.from_raw(raw)))
    return profiles


def _log_near_thresholds(profiles: list[RiskProfile]) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    near_high_risk = [
        f"{format_patient_id(p.patient_id)}({p.total_score}:"
        f"BP:{p.bp_score}+Temp:{p.temperature_score}+Age:{p.age_score})"
        for p in profiles
        if p.total_score == HIGH_RISK_THRESHOLD - 1
    ]
    near_fever = [
        f"{format_patient_id(p.patient_id)}({p.temperature_value}F)"
        for p in profiles
        if not p.has_fever
        and p.temperature_value is not None
        and NEAR_FEVER_FLOOR <= p.temperature_value < FEVER_THRESHOLD
    ]
    if near_high_risk:
        logger.debug(
            "고위험 기준 근접 환자 %d명: %s",
            len(near_high_risk),
            ", ".join(near_high_risk[:5]),
        )
    if near_fever:
        logger.debug(
            "발열 기준 근접 환자 %d명: %s", len(near_fever), ", ".join(near_fever[:5])
        )


def aggregate_alerts(profiles: list[RiskProfile]) -> AlertsPayload:
    """위험 프로파일을 알림 분류로 집계

    Args:
        profiles: 위험 프로파일 목록

    Returns:
        정렬·중복 제거된 알림 페이로드
    """
    high_risk: set[str] = set()
    fever: set[str] = set()
    data_quality: set[str] = set()

    for profile in profiles:
        patient_id = format_patient_id(profile.patient_id)
        if profile.total_score >= HIGH_RISK_THRESHOLD:
            high_risk.add(patient_id)
        if profile.has_fever:
            fever.add(patient_id)
        if profile.has_data_quality_issue:
            data_quality.add(patient_id)

    _log_near_thresholds(profiles)
    return AlertsPayload(
        high_risk_patients=sorted(high_risk),
        fever_patients=sorted(fever),
        data_quality_issues=sorted(data_quality),
    )


def build_alerts(patients: Iterable[object]) -> AlertsPayload:
    """환자 목록을 알림 분류로 집계

    Args:
        patients: 원본 환자 레코드 목록

    Returns:
        정렬·중복 제거된 알림 페이로드
    """
    return aggregate_alerts(score_patients(patients))
