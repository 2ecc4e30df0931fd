from __future__ import annotations

from riskline.models.alerts import FieldScore, RiskProfile
from riskline.models.patient import PatientRecord
from riskline.utils.parsing import parse_number

FEVER_THRESHOLD = 99.6
HIGH_FEVER_THRESHOLD = 101.0
LOW_FEVER_UPPER = 100.9
# 경계값(99.6, 100.9)의 부동소수 왕복 오차 흡수용
TEMPERATURE_EPSILON = 0.0001

BP_MISSING_TOKENS = {"n/a", "null", "undefined"}

_INVALID = FieldScore(score=0, valid=False)


def _is_blank(value: object) -> bool:
    return value is None or value == ""


def score_blood_pressure(value: object) -> FieldScore:
    """혈압 문자열을 점수화

    Args:
        value: "수축기/이완기" 형식의 원본 값

    Returns:
        점수 결과
    """
    if _is_blank(value):
        return _INVALID
    text = str(value).strip()
    if not text or text.lower() in BP_MISSING_TOKENS:
        return _INVALID

    parts = text.split("/")
    if len(parts) != 2:
        return _INVALID
    raw_systolic, raw_diastolic = (part.strip() for part in parts)
    if not raw_systolic or not raw_diastolic:
        return _INVALID

    systolic = parse_number(raw_systolic)
    diastolic = parse_number(raw_diastolic)
    if systolic is None or diastolic is None:
        return _INVALID
    if not 0 <= systolic <= 300 or not 0 <= diastolic <= 200:
        return _INVALID

    # 단계가 엇갈리면 높은 위험 단계를 적용
    if systolic >= 140 or diastolic >= 90:
        return FieldScore(score=3, valid=True)
    if 130 <= systolic <= 139 or 80 <= diastolic <= 89:
        return FieldScore(score=2, valid=True)
    if 120 <= systolic <= 129 and diastolic < 80:
        return FieldScore(score=1, valid=True)
    return FieldScore(score=0, valid=True)


def score_temperature(value: object) -> FieldScore:
    """체온(화씨)을 점수화

    고열(101.0 이상)은 범위 검사 없이 허용한다.

    Args:
        value: 원본 체온 값

    Returns:
        점수 결과
    """
    if _is_blank(value):
        return _INVALID
    temperature = parse_number(value)
    if temperature is None:
        return _INVALID

    if temperature >= HIGH_FEVER_THRESHOLD:
        return FieldScore(score=2, valid=True, value=temperature)
    if not 80 <= temperature <= 115:
        return _INVALID
    if (
        FEVER_THRESHOLD - TEMPERATURE_EPSILON
        <= temperature
        <= LOW_FEVER_UPPER + TEMPERATURE_EPSILON
    ):
        return FieldScore(score=1, valid=True, value=temperature)
    return FieldScore(score=0, valid=True, value=temperature)


def score_age(value: object) -> FieldScore:
    """나이를 점수화

    Args:
        value: 원본 나이 값

    Returns:
        점수 결과
    """
    if _is_blank(value):
        return _INVALID
    age = parse_number(value)
    if age is None:
        return _INVALID
    if not age.is_integer() or not 0 <= age <= 150:
        return _INVALID

    if age > 65:
        return FieldScore(score=2, valid=True)
    if age >= 40:
        return FieldScore(score=1, valid=True)
    return FieldScore(score=0, valid=True)


def build_risk_profile(patient: PatientRecord) -> RiskProfile:
    """환자 레코드로 위험 프로파일 생성

    Args:
        patient: 환자 레코드

    Returns:
        위험 프로파일
    """
    bp = score_blood_pressure(patient.blood_pressure)
    temperature = score_temperature(patient.temperature)
    age = score_age(patient.age)

    # 발열 알림 기준은 점수 구간과 달리 오차 허용 없음
    has_fever = (
        temperature.valid
        and temperature.value is not None
        and temperature.value >= FEVER_THRESHOLD
    )
    return RiskProfile(
        patient_id=patient.patient_id,
        bp_score=bp.score,
        temperature_score=temperature.score,
        age_score=age.score,
        total_score=bp.score + temperature.score + age.score,
        has_fever=has_fever,
        has_data_quality_issue=not (bp.valid and temperature.valid and age.valid),
        temperature_value=temperature.value,
    )
