from __future__ import annotations

from apscheduler.schedulers.background import BackgroundScheduler

from riskline.core.config import AppConfig
from riskline.core.pipeline import run_scheduled_assessment

JOB_ID = "assessment-run"

_scheduler: BackgroundScheduler | None = None


def start_scheduler(config: AppConfig) -> BackgroundScheduler:
    """주기 평가용 백그라운드 스케줄러를 시작

    Args:
        config: 실행 설정 객체

    Returns:
        BackgroundScheduler 인스턴스
    """
    global _scheduler
    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
    scheduler = BackgroundScheduler()
    if config.schedule.enabled:
        scheduler.add_job(
            run_scheduled_assessment,
            "interval",
            minutes=config.schedule.interval_minutes,
            id=JOB_ID,
            max_instances=1,
            replace_existing=True,
        )
    scheduler.start()
    _scheduler = scheduler
    return scheduler
