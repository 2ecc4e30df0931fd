from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수에서 애플리케이션 설정을 로드"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: Literal["local", "dev", "prod"] = "local"
    version: str = "0.1.0"
    log_level: str = "INFO"
    api_base_url: str = "https://assessment.ksensetech.com/api"
    api_key: str = ""
    config_path: str = "assessment.yaml"
    scheduler_enabled: bool = False


class ClientConfig(BaseModel):
    """원격 환자 API 호출 정책"""

    page_limit: int = Field(default=20, gt=0)
    max_retries: int = Field(default=5, gt=0)
    retry_base_delay_ms: int = Field(default=500, gt=0)
    retry_max_delay_ms: int = Field(default=10000, gt=0)
    rate_limit_delay_ms: int = Field(default=2000, gt=0)
    page_request_delay_ms: int = Field(default=1000, ge=0)
    request_timeout_seconds: float = Field(default=15.0, gt=0)
    max_pages: int = Field(default=100, gt=0)


class ClientEnvOverrides(BaseSettings):
    """환경 변수로 지정한 클라이언트 정책 값(PAGE_LIMIT 등)"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    page_limit: int | None = None
    max_retries: int | None = None
    retry_base_delay_ms: int | None = None
    retry_max_delay_ms: int | None = None
    rate_limit_delay_ms: int | None = None
    page_request_delay_ms: int | None = None


class ScheduleConfig(BaseModel):
    """주기 실행 설정"""

    enabled: bool = False
    interval_minutes: int = Field(default=60, gt=0)


class AppConfig(BaseModel):
    """평가 실행 설정 래퍼"""

    client: ClientConfig = Field(default_factory=ClientConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)


@lru_cache
def get_settings() -> Settings:
    """캐시된 설정 인스턴스를 반환"""
    return Settings()


@lru_cache
def load_app_config() -> AppConfig:
    """설정 파일(YAML)에서 실행 설정 로드

    파일이 없으면 기본값을 사용하고, 환경 변수 값이 있으면 클라이언트 설정을 덮어쓴다.

    Returns:
        실행 설정 인스턴스
    """
    settings = get_settings()
    path = Path(settings.config_path)
    data: dict = {}
    if path.is_file():
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    config = AppConfig(**data)
    overrides = ClientEnvOverrides().model_dump(exclude_none=True)
    if overrides:
        config.client = ClientConfig(**{**config.client.model_dump(), **overrides})
    return config


def reload_app_config() -> AppConfig:
    """설정 캐시를 초기화하고 다시 로드

    Returns:
        실행 설정 인스턴스
    """
    load_app_config.cache_clear()
    return load_app_config()
