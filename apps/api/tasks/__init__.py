"""
Celery tasks for background processing.

Tasks are defined here and imported by both the API (to enqueue) and
the worker (to execute).
"""
from celery import Celery
from core.config import settings

# Create Celery app instance
celery_app = Celery(
    "goal_plan_engine",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,  # discovery is a single LLM call + one insert
    task_soft_time_limit=4 * 60,
    broker_connection_timeout=2,
)

# Import tasks to register them
from . import standards_tasks  # noqa: E402

__all__ = ["celery_app"]
