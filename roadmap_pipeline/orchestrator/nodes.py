from typing import Any, Dict, List
import logging

from roadmap_pipeline.errors import StorageError
from roadmap_pipeline.models.schemas import RegenerationStatus, Resource, Topic
from roadmap_pipeline.storage.base import RESOURCES, ROADMAPS, TOPICS
from .state import RegenerationState

logger = logging.getLogger(__name__)

REJECTED_MESSAGE = (
    "No topics could be read from the generated roadmap. "
    "Please try regenerating with different feedback."
)


def _advance(status: RegenerationStatus, **updates) -> Dict[str, Any]:
    return {"status": status, "status_history": [status], **updates}


async def load_existing(state: RegenerationState, record_store) -> Dict[str, Any]:
    """
    Read the roadmap's stored topics and resources.

    When ``kept_topic_ids`` is given, it replaces the stored keep flags for
    this run; otherwise the stored flags are used as they are. Nothing is
    written here: ``persist`` syncs the flags once the new roadmap is saved.
    """
    roadmap_id = state["roadmap_id"]
    kept_topic_ids = state.get("kept_topic_ids")

    topic_records = await record_store.select_where(TOPICS, lambda r: r.get("roadmap_id") == roadmap_id)
    topic_ids = {r["id"] for r in topic_records}
    resource_records = await record_store.select_where(
        RESOURCES,
        lambda r: r.get("roadmap_id") == roadmap_id or r.get("topic_id") in topic_ids
    )

    existing_topics = [Topic(**r) for r in topic_records]
    if kept_topic_ids is not None:
        kept = set(kept_topic_ids)
        existing_topics = [t.model_copy(update={"keep": t.id in kept}) for t in existing_topics]
    existing_resources = [Resource(**r) for r in resource_records]
    kept_topics = [t for t in existing_topics if t.keep]
    logger.info(
        f"Loaded roadmap {roadmap_id}: {len(existing_topics)} topics "
        f"({len(kept_topics)} kept), {len(existing_resources)} resources"
    )

    updates = {
        "existing_topics": existing_topics,
        "existing_resources": existing_resources,
        "kept_topics": kept_topics,
    }
    if not state.get("existing_roadmap"):
        roadmaps = await record_store.select_where(ROADMAPS, lambda r: r["id"] == roadmap_id)
        if roadmaps:
            updates["existing_roadmap"] = roadmaps[0].get("ai_regenerated_content")
    return _advance(RegenerationStatus.IDLE, **updates)


async def generate_document(state: RegenerationState, generator) -> Dict[str, Any]:
    document = await generator.generate(
        state["goal"],
        preferences=state.get("preferences"),
        feedback=state.get("feedback"),
        kept_topics=state.get("kept_topics", []),
        existing_roadmap=state.get("existing_roadmap"),
    )
    return {"document": document}


async def record_document(state: RegenerationState, record_store) -> Dict[str, Any]:
    """Keep the raw document on the roadmap record, whatever happens next."""
    roadmap_id = state["roadmap_id"]
    document = state.get("document") or ""
    updated = await record_store.update_where(
        ROADMAPS, lambda r: r["id"] == roadmap_id, {"ai_regenerated_content": document}
    )
    if not updated:
        logger.debug(f"No roadmap record {roadmap_id} to store the raw document on")
    return _advance(RegenerationStatus.PARSING)


def segment_document(state: RegenerationState, parser) -> Dict[str, Any]:
    blocks = parser.segment(state.get("document") or "")
    if not blocks:
        logger.warning(f"No week blocks found in document for roadmap {state['roadmap_id']}")
        return {"blocks": []}
    return _advance(RegenerationStatus.VALIDATING, blocks=blocks)


async def validate_and_build(state: RegenerationState, parser) -> Dict[str, Any]:
    """Validate every resource URL in one pass, then build topics and resources."""
    blocks = state["blocks"]
    urls = parser.collect_urls(blocks)
    results = await parser.validator.validate_many(urls) if urls else {}
    parse = parser.build(
        blocks,
        results,
        kept_topics=state.get("kept_topics", []),
        roadmap_id=state["roadmap_id"],
        total_weeks_hint=state.get("total_weeks_hint"),
        skill=state.get("goal") or None,
    )
    return _advance(RegenerationStatus.RECONCILING, parse=parse)


def reconcile(state: RegenerationState, engine) -> Dict[str, Any]:
    plan = engine.reconcile(
        state.get("existing_topics", []),
        state.get("existing_resources", []),
        [t.id for t in state.get("kept_topics", [])],
        state["parse"],
        roadmap_id=state["roadmap_id"],
    )
    return _advance(RegenerationStatus.PERSISTING, plan=plan)


async def sync_keep_flags(record_store, roadmap_id: str, kept_topic_ids: List[str]) -> None:
    """Make the stored keep flags match the caller's kept ids."""
    kept = set(kept_topic_ids)
    await record_store.update_where(
        TOPICS,
        lambda r: r.get("roadmap_id") == roadmap_id and r["id"] not in kept and r.get("keep"),
        {"keep": False}
    )
    if kept:
        await record_store.update_where(
            TOPICS,
            lambda r: r.get("roadmap_id") == roadmap_id and r["id"] in kept,
            {"keep": True}
        )


async def persist(state: RegenerationState, engine, record_store) -> Dict[str, Any]:
    """
    Apply the plan, then sync keep flags.

    Flags are left alone when every insert batch failed, so a failed run
    leaves the stored topics exactly as they were.
    """
    plan = state["plan"]
    report = await engine.apply(plan, record_store)
    status = engine.status_for(report)

    kept_topic_ids = state.get("kept_topic_ids")
    if kept_topic_ids is not None and status != RegenerationStatus.FAILED:
        try:
            await sync_keep_flags(record_store, state["roadmap_id"], kept_topic_ids)
        except StorageError as e:
            logger.error(f"Error syncing keep flags for roadmap {state['roadmap_id']}: {e}")
            status = RegenerationStatus.PARTIALLY_FAILED

    if status == RegenerationStatus.FAILED:
        message = "The new roadmap could not be saved. Your existing topics were left unchanged."
    elif status == RegenerationStatus.PARTIALLY_FAILED:
        message = (
            f"The roadmap was only partially updated: {len(report.failed_batches)} of "
            f"{report.attempted_batches} storage batches failed."
        )
    else:
        message = (
            f"Roadmap regenerated with {report.inserted_topics} new topics "
            f"and {len(plan.kept_topic_ids)} kept topics."
        )
    logger.info(f"Regeneration of roadmap {state['roadmap_id']} finished: {status.value}")
    return _advance(status, report=report, message=message)


def reject(state: RegenerationState) -> Dict[str, Any]:
    logger.warning(f"Rejected regeneration of roadmap {state['roadmap_id']}: no topics parsed")
    return _advance(RegenerationStatus.REJECTED, message=REJECTED_MESSAGE)
