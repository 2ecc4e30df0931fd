from typing import Any

from pydantic import BaseModel, Field


class FieldScore(BaseModel):
    """단일 필드 점수 결과"""

    score: int = Field(..., description="위험 점수")
    valid: bool = Field(..., description="유효성 여부")
    value: float | None = Field(default=None, description="파싱된 값")


class RiskProfile(BaseModel):
    """환자별 위험 프로파일"""

    patient_id: Any = Field(..., description="환자 식별자")
    bp_score: int = Field(..., description="혈압 점수")
    temperature_score: int = Field(..., description="체온 점수")
    age_score: int = Field(..., description="나이 점수")
    total_score: int = Field(..., description="합계 점수")
    has_fever: bool = Field(..., description="발열 여부")
    has_data_quality_issue: bool = Field(..., description="데이터 품질 문제 여부")
    temperature_value: float | None = Field(default=None, description="체온 값")


class AlertsPayload(BaseModel):
    """평가 제출 페이로드"""

    high_risk_patients: list[str] = Field(default_factory=list, description="고위험 환자")
    fever_patients: list[str] = Field(default_factory=list, description="발열 환자")
    data_quality_issues: list[str] = Field(
        default_factory=list, description="데이터 품질 문제 환자"
    )


class AssessmentRunResult(BaseModel):
    """평가 파이프라인 실행 결과"""

    run_id: str
    alerts: AlertsPayload
    patient_count: int
    submission: Any = None
