from typing import Iterable, List, Optional
import logging

from roadmap_pipeline.errors import InvariantViolation
from roadmap_pipeline.models.schemas import (
    BatchFailure, ParseResult, PersistenceReport, ReconciliationPlan,
    RegenerationStatus, Resource, Topic
)
from roadmap_pipeline.storage.base import RESOURCES, TOPICS, RecordStore

logger = logging.getLogger(__name__)


def chunked(items: List, size: int) -> List[List]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class ReconciliationEngine:
    """
    Moves stored roadmap state to a freshly parsed one while keeping the
    topics the user chose to preserve.

    ``reconcile`` is pure and returns a ReconciliationPlan. ``apply`` writes
    the plan in fixed-size batches: inserts first, then deletes, and deletes
    are skipped entirely when no insert batch succeeded. Batches already
    written are not rolled back when a later batch fails.
    """

    def __init__(self, config=None):
        self.batch_size = getattr(config, 'STORAGE_BATCH_SIZE', 10)

    def reconcile(
        self,
        existing_topics: List[Topic],
        existing_resources: List[Resource],
        kept_topic_ids: Iterable[str],
        parsed: ParseResult,
        roadmap_id: Optional[str] = None,
    ) -> ReconciliationPlan:
        """
        Compute the storage mutations for one regeneration.

        Args:
            existing_topics: Topics currently stored for the roadmap
            existing_resources: Resources currently stored for the roadmap
            kept_topic_ids: Ids the caller marked keep (stored ``keep`` flags count too)
            parsed: Output of the roadmap parser
            roadmap_id: Roadmap being regenerated

        Returns:
            ReconciliationPlan

        Raises:
            InvariantViolation: if a parsed resource has no parsed topic, or a
                parsed topic reuses the id of a stored topic that is not kept
        """
        parsed_topic_ids = {t.id for t in parsed.topics}
        orphans = [r.id for r in parsed.resources if r.topic_id not in parsed_topic_ids]
        if orphans:
            raise InvariantViolation(f"Parsed resources without a parsed topic: {orphans}")

        kept_ids = set(kept_topic_ids) | {t.id for t in existing_topics if t.keep}
        kept = [t for t in existing_topics if t.id in kept_ids]
        removed_ids = {t.id for t in existing_topics if t.id not in kept_ids}

        kept_titles = {t.title.lower() for t in kept}
        topics_to_insert = []
        skipped = []
        for topic in parsed.topics:
            if topic.title.lower() in kept_titles:
                skipped.append(topic.title)
                continue
            topics_to_insert.append(topic)

        existing_ids = {t.id for t in existing_topics}
        clashes = [t.id for t in topics_to_insert if t.id in existing_ids]
        if clashes:
            raise InvariantViolation(f"Parsed topics reuse ids of stored topics: {clashes}")

        insert_ids = {t.id for t in topics_to_insert}
        plan = ReconciliationPlan(
            roadmap_id=roadmap_id,
            kept_topic_ids=[t.id for t in kept],
            topics_to_delete=[t.id for t in existing_topics if t.id in removed_ids],
            topics_to_insert=topics_to_insert,
            resources_to_delete=[r.id for r in existing_resources if r.topic_id in removed_ids],
            resources_to_insert=[r for r in parsed.resources if r.topic_id in insert_ids],
            skipped_duplicate_titles=skipped,
        )

        if skipped:
            logger.info(f"Skipping {len(skipped)} parsed topics that duplicate kept topics: {skipped}")
        logger.info(
            f"Reconciliation plan: keep {len(plan.kept_topic_ids)}, "
            f"insert {len(plan.topics_to_insert)} topics / {len(plan.resources_to_insert)} resources, "
            f"delete {len(plan.topics_to_delete)} topics / {len(plan.resources_to_delete)} resources"
        )
        return plan

    async def _run_batch(self, report: PersistenceReport, collection: str, operation: str,
                         index: int, ids: List[str], write) -> bool:
        report.attempted_batches += 1
        try:
            await write
            return True
        except Exception as e:
            logger.error(f"Error in {collection} {operation} batch {index}: {e}")
            report.failed_batches.append(BatchFailure(
                collection=collection,
                operation=operation,
                batch_index=index,
                record_ids=ids,
                error=str(e),
            ))
            return False

    async def apply(self, plan: ReconciliationPlan, store: RecordStore) -> PersistenceReport:
        """
        Write a plan to the store in batches of ``batch_size``.

        A failed batch is recorded and the remaining batches still run.

        Returns:
            PersistenceReport with per-batch failures
        """
        report = PersistenceReport()

        for collection, records in ((TOPICS, plan.topics_to_insert), (RESOURCES, plan.resources_to_insert)):
            for index, batch in enumerate(chunked(records, self.batch_size)):
                report.insert_batches += 1
                ids = [r.id for r in batch]
                ok = await self._run_batch(
                    report, collection, "insert", index, ids,
                    store.insert_many(collection, [r.to_record() for r in batch])
                )
                if ok and collection == TOPICS:
                    report.inserted_topics += len(batch)
                elif ok:
                    report.inserted_resources += len(batch)

        if report.total_failure:
            report.deletes_skipped = True
            logger.error("Every insert batch failed; leaving existing topics and resources untouched")
            return report

        # Resources go first so the counts are not hidden by the topic cascade
        for collection, ids in ((RESOURCES, plan.resources_to_delete), (TOPICS, plan.topics_to_delete)):
            for index, batch in enumerate(chunked(ids, self.batch_size)):
                batch_ids = set(batch)
                ok = await self._run_batch(
                    report, collection, "delete", index, batch,
                    store.delete_where(collection, lambda r, ids=batch_ids: r["id"] in ids)
                )
                if ok and collection == TOPICS:
                    report.deleted_topics += len(batch)
                elif ok:
                    report.deleted_resources += len(batch)

        if report.partial_failure:
            logger.warning(f"{len(report.failed_batches)} of {report.attempted_batches} storage batches failed")
        else:
            logger.info(
                f"Persisted {report.inserted_topics} topics and {report.inserted_resources} resources, "
                f"removed {report.deleted_topics} topics and {report.deleted_resources} resources"
            )
        return report

    @staticmethod
    def status_for(report: PersistenceReport) -> RegenerationStatus:
        """Map a persistence report onto the regeneration outcome."""
        if report.total_failure:
            return RegenerationStatus.FAILED
        if report.partial_failure:
            return RegenerationStatus.PARTIALLY_FAILED
        return RegenerationStatus.SUCCEEDED
