from config.config import settings
from gcp.db import FirestoreStore
from utils.common_models import ActionResult
from logger import logger

VISITORS_FIELD = 'count'

class MetricsManager():
    """Site-wide counters kept in the metrics collection."""

    def __init__(self, store: FirestoreStore):
        self.store = store

    def increment_visitors(self) -> ActionResult[int]:
        try:
            count = self.store.increment(
                settings.GCP.Firestore.METRICS_COLLECTION_NAME,
                settings.GCP.Firestore.VISITORS_DOCUMENT_ID,
                VISITORS_FIELD
            )
            logger.debug(f"[METRICS_MANAGER] Visitor count is now {count}")
            return ActionResult.ok(count)
        except Exception as e:
            logger.exception(f"[METRICS_MANAGER] Failed to increment visitor count: {e}")
            return ActionResult.fail(str(e) or "Failed to increment visitor count")

    def visitor_count(self) -> ActionResult[int]:
        try:
            document = self.store.get(
                settings.GCP.Firestore.METRICS_COLLECTION_NAME,
                settings.GCP.Firestore.VISITORS_DOCUMENT_ID
            ) or {}
            return ActionResult.ok(int(document.get(VISITORS_FIELD, 0)))
        except Exception as e:
            logger.exception(f"[METRICS_MANAGER] Failed to read visitor count: {e}")
            return ActionResult.fail(str(e) or "Failed to read visitor count")
