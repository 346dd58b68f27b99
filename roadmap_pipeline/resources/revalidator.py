from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from pydantic import BaseModel

from roadmap_pipeline.reconcile.engine import chunked
from roadmap_pipeline.storage.base import RESOURCES, Record, RecordStore
from roadmap_pipeline.validation.url_validator import UrlValidator

logger = logging.getLogger(__name__)


class RevalidationReport(BaseModel):
    """Counts from one revalidation run."""
    selected: int = 0
    validated: int = 0
    updated: int = 0
    invalid: int = 0
    errored: int = 0


def _as_datetime(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


class ResourceRevalidator:
    """
    Periodic re-check of stored resource links.

    Picks resources never validated or last validated before the staleness
    threshold, validates their URLs and writes the verdict back onto each
    record. Fallback resources are skipped; their links are built from
    search templates.
    """

    def __init__(self, validator: UrlValidator, store: RecordStore, config=None):
        self.validator = validator
        self.store = store
        self.clock = validator.clock
        self.stale_after = timedelta(days=getattr(config, 'RESOURCE_REVALIDATE_AFTER_DAYS', 2))
        self.limit = getattr(config, 'RESOURCE_REVALIDATE_LIMIT', 1000)
        self.batch_size = getattr(config, 'STORAGE_BATCH_SIZE', 10)

    def is_stale(self, record: Record) -> bool:
        if record.get("is_fallback") or not record.get("url"):
            return False
        validated_at = _as_datetime(record.get("url_validated_at"))
        return validated_at is None or validated_at < self.clock.now() - self.stale_after

    async def run(self, roadmap_id: Optional[str] = None) -> RevalidationReport:
        """
        Revalidate stale resources.

        Args:
            roadmap_id: Limit the run to one roadmap

        Returns:
            RevalidationReport
        """
        records = await self.store.select_where(
            RESOURCES,
            lambda r: (roadmap_id is None or r.get("roadmap_id") == roadmap_id) and self.is_stale(r)
        )
        records = records[:self.limit]
        report = RevalidationReport(selected=len(records))
        if not records:
            logger.info("No resources to revalidate")
            return report

        logger.info(f"Found {len(records)} resources to revalidate")
        for batch in chunked(records, self.batch_size):
            results = await self.validator.validate_batch([r["url"] for r in batch])
            for record in batch:
                result = results[record["url"]]
                report.validated += 1
                if not result.is_valid:
                    report.invalid += 1
                try:
                    await self.store.update_where(
                        RESOURCES,
                        lambda r, resource_id=record["id"]: r["id"] == resource_id,
                        {
                            "url_validated": result.is_valid,
                            "url_validated_at": result.validated_at,
                            "url_status_code": result.status_code,
                            "url_error": result.error,
                        }
                    )
                    report.updated += 1
                except Exception as e:
                    report.errored += 1
                    logger.error(f"Error updating resource {record['id']}: {e}")

        logger.info(
            f"Revalidated {report.validated} resources: {report.invalid} invalid, "
            f"{report.updated} updated, {report.errored} errors"
        )
        return report
