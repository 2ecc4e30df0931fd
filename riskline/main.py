from fastapi import FastAPI

from riskline.api.routes import router as api_router
from riskline.core.config import get_settings, load_app_config
from riskline.core.logging import configure_logging
from riskline.core.scheduler import start_scheduler


def create_app() -> FastAPI:
    """애플리케이션을 생성하고 FastAPI를 설정"""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Riskline", version=settings.version)
    app.include_router(api_router)

    if settings.scheduler_enabled:
        config = load_app_config()
        start_scheduler(config)

    return app


app = create_app()
