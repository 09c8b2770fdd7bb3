"""
Standards Discovery Celery Task

Plan generation never waits on discovery. When a metric has no standard,
enrichment enqueues this task and moves on with an estimated target; a
stored result only benefits later requests for the same metric.

Task contract:
- At most one in-flight discovery per metric_key (Redis SET NX lock),
  so concurrent requests don't insert duplicate catalog rows
- No retries: a failed discovery is retried naturally the next time a
  plan needs the metric
- Returns a small status dict, which is the task's error channel
"""

import logging
import uuid
from typing import Dict

from celery import Task

from tasks import celery_app
from core.cache import acquire_lock, cache_key, release_lock
from core.config import settings
from core.database import get_db_sync
from services.goal_plans.standards_discovery import StandardsDiscovery
from services.goal_plans.synthesizer import get_text_synthesizer

logger = logging.getLogger(__name__)


def _lock_key(metric_key: str) -> str:
    return cache_key("standards_discovery", "lock", metric_key)


@celery_app.task(
    name="tasks.discover_metric_standard",
    bind=True,
    max_retries=0,
    soft_time_limit=120,
    time_limit=150,
)
def discover_metric_standard(self: Task, metric_key: str, context: str) -> Dict:
    lock_key = _lock_key(metric_key)
    lock_token = self.request.id or uuid.uuid4().hex
    if not acquire_lock(lock_key, settings.STANDARDS_DISCOVERY_LOCK_TTL_S, lock_token):
        logger.info(f"Standards discovery already in flight for {metric_key}")
        return {"status": "skipped", "metric_key": metric_key, "reason": "in_flight"}

    db = get_db_sync()
    try:
        discovery = StandardsDiscovery(db, get_text_synthesizer())
        standard_id = discovery.discover_and_store(metric_key, context)
        status = "stored" if standard_id else "not_found"
        logger.info(
            f"Standards discovery for {metric_key}: {status}",
            extra={"extra_fields": {"metric_key": metric_key, "status": status, "standard_id": standard_id}},
        )
        return {"status": status, "metric_key": metric_key, "standard_id": standard_id}
    except Exception as e:
        logger.error(f"Standards discovery task failed for {metric_key}: {e}", exc_info=True)
        return {"status": "error", "metric_key": metric_key, "error": str(e)}
    finally:
        db.close()
        release_lock(lock_key, lock_token)


def enqueue_standard_discovery(metric_key: str, context: str) -> bool:
    """
    Fire-and-forget discovery. Returns True if the task was enqueued.

    Broker failures are logged and swallowed; they must not affect the
    plan being generated.
    """
    if not settings.STANDARDS_DISCOVERY_ENABLED:
        return False
    try:
        discover_metric_standard.apply_async(args=[metric_key, context], retry=False)
        return True
    except Exception as e:
        logger.warning(f"Could not enqueue standards discovery for {metric_key}: {e}")
        return False
