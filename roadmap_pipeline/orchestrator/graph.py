from functools import partial
from typing import Any, List, Optional
import logging

from langgraph.graph import START, END, StateGraph

from roadmap_pipeline.models.schemas import LearningPreferences, RegenerationResult, RegenerationStatus
from roadmap_pipeline.parsing.markdown_parser import MarkdownRoadmapParser
from roadmap_pipeline.reconcile.engine import ReconciliationEngine
from roadmap_pipeline.resources.fallback import FallbackResourceGenerator
from roadmap_pipeline.utils.ids import IdGenerator, UuidGenerator
from roadmap_pipeline.validation.url_validator import UrlValidator
from .edges import route_after_load, route_after_segment
from .nodes import (
    generate_document, load_existing, persist, reconcile, record_document,
    reject, segment_document, validate_and_build
)
from .state import RegenerationState

logger = logging.getLogger(__name__)

# CompiledGraph is the return type of StateGraph.compile()
CompiledGraph = Any


def create_regeneration_graph(
    store,
    config,
    validator: Optional[UrlValidator] = None,
    parser: Optional[MarkdownRoadmapParser] = None,
    engine: Optional[ReconciliationEngine] = None,
    generator=None,
    id_generator: Optional[IdGenerator] = None,
) -> CompiledGraph:
    """
    Create the roadmap regeneration graph.

    Flow: load_existing → [generate] → record_document → segment →
    validate → reconcile → persist, with segment routing to reject when the
    document has no week blocks.

    Args:
        store: RecordStore holding topics, resources and roadmaps
        config: Configuration object
        validator: UrlValidator (built from config when omitted)
        parser: MarkdownRoadmapParser (built around the validator when omitted)
        engine: ReconciliationEngine (built from config when omitted)
        generator: Optional RoadmapGenerator; enables runs that start from a goal
        id_generator: Id source for new topics and resources

    Returns:
        Compiled graph
    """
    id_generator = id_generator or UuidGenerator()
    if parser is None:
        validator = validator or UrlValidator(config)
        parser = MarkdownRoadmapParser(
            validator,
            fallback_generator=FallbackResourceGenerator(id_generator, clock=validator.clock),
            id_generator=id_generator,
            config=config,
        )
    engine = engine or ReconciliationEngine(config)

    graph_builder = StateGraph(RegenerationState)
    graph_builder.add_node("load_existing", partial(load_existing, record_store=store))
    graph_builder.add_node("record_document", partial(record_document, record_store=store))
    graph_builder.add_node("segment", partial(segment_document, parser=parser))
    graph_builder.add_node("validate", partial(validate_and_build, parser=parser))
    graph_builder.add_node("reconcile", partial(reconcile, engine=engine))
    graph_builder.add_node("persist", partial(persist, engine=engine, record_store=store))
    graph_builder.add_node("reject", reject)

    graph_builder.add_edge(START, "load_existing")
    if generator is not None:
        graph_builder.add_node("generate", partial(generate_document, generator=generator))
        graph_builder.add_conditional_edges("load_existing", route_after_load)
        graph_builder.add_edge("generate", "record_document")
    else:
        graph_builder.add_edge("load_existing", "record_document")

    graph_builder.add_edge("record_document", "segment")
    graph_builder.add_conditional_edges("segment", route_after_segment)
    graph_builder.add_edge("validate", "reconcile")
    graph_builder.add_edge("reconcile", "persist")
    graph_builder.add_edge("persist", END)
    graph_builder.add_edge("reject", END)

    graph = graph_builder.compile()
    logger.info("Regeneration graph compiled")
    return graph


async def run_regeneration(
    graph: CompiledGraph,
    roadmap_id: str,
    document: Optional[str] = None,
    kept_topic_ids: Optional[List[str]] = None,
    total_weeks_hint: Optional[int] = None,
    goal: Optional[str] = None,
    preferences: Optional[LearningPreferences] = None,
    feedback: Optional[str] = None,
) -> RegenerationResult:
    """
    Run one regeneration cycle.

    Args:
        graph: Graph from ``create_regeneration_graph``
        roadmap_id: Roadmap to regenerate
        document: Generated markdown; when omitted, ``goal`` is used to
            generate one (requires a graph built with a generator)
        kept_topic_ids: Topics to preserve; None keeps the stored keep flags
        total_weeks_hint: Total weeks for section assignment
        goal: Skill or goal; picks the section progression and drives generation
        preferences, feedback: Generation inputs

    Returns:
        RegenerationResult; the raw document is included on every outcome
    """
    initial_state: RegenerationState = {
        "roadmap_id": roadmap_id,
        "document": document or "",
        "kept_topic_ids": kept_topic_ids,
        "total_weeks_hint": total_weeks_hint,
        "goal": goal or "",
        "preferences": preferences,
        "feedback": feedback,
        "status": RegenerationStatus.IDLE,
        "status_history": [],
    }
    final_state = await graph.ainvoke(initial_state)

    return RegenerationResult(
        roadmap_id=roadmap_id,
        status=final_state["status"],
        message=final_state.get("message", ""),
        raw_document=final_state.get("document") or "",
        parse=final_state.get("parse"),
        plan=final_state.get("plan"),
        report=final_state.get("report"),
    )
