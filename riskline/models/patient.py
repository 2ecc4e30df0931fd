from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field

KNOWN_FIELDS = (
    "patient_id",
    "name",
    "age",
    "gender",
    "blood_pressure",
    "temperature",
    "visit_date",
    "diagnosis",
    "medications",
)


class PatientRecord(BaseModel):
    """원격 API의 환자 레코드

    알려진 필드는 원본 값을 그대로 보관하고, 그 외 필드는 extra에 모은다.
    """

    patient_id: Any = Field(default=None, description="환자 식별자(문자열/숫자/불리언)")
    name: Any = Field(default=None, description="환자 이름")
    age: Any = Field(default=None, description="나이(년)")
    gender: Any = Field(default=None, description="성별")
    blood_pressure: Any = Field(default=None, description="혈압(수축기/이완기)")
    temperature: Any = Field(default=None, description="체온(화씨)")
    visit_date: Any = Field(default=None, description="방문일")
    diagnosis: Any = Field(default=None, description="진단명")
    medications: Any = Field(default=None, description="복용 약물")
    extra: dict[str, Any] = Field(default_factory=dict, description="알 수 없는 추가 필드")

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> PatientRecord:
        """원본 매핑을 레코드로 변환

        Args:
            raw: 원본 환자 매핑

        Returns:
            환자 레코드
        """
        known = {key: raw[key] for key in KNOWN_FIELDS if key in raw}
        extra = {key: value for key, value in raw.items() if key not in KNOWN_FIELDS}
        return cls(**known, extra=extra)

    def to_raw(self) -> dict[str, Any]:
        """원본 형태의 매핑으로 복원

        Returns:
            환자 매핑
        """
        raw = {
            key: getattr(self, key)
            for key in KNOWN_FIELDS
            if key in self.model_fields_set
        }
        raw.update(self.extra)
        return raw
