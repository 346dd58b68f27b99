from typing import Annotated, List, Optional, TypedDict
import operator

from roadmap_pipeline.models.schemas import (
    LearningPreferences, ParseResult, PersistenceReport, ReconciliationPlan,
    RegenerationStatus, Resource, Topic
)
from roadmap_pipeline.parsing.markdown_parser import WeekBlock


class RegenerationState(TypedDict, total=False):
    """State for one regeneration cycle"""
    # Inputs
    roadmap_id: str
    document: str
    kept_topic_ids: Optional[List[str]]
    total_weeks_hint: Optional[int]

    # Generation inputs (only used when no document is supplied)
    goal: str
    preferences: Optional[LearningPreferences]
    feedback: Optional[str]
    existing_roadmap: Optional[str]

    # Stored state read at the start of the cycle
    existing_topics: List[Topic]
    existing_resources: List[Resource]
    kept_topics: List[Topic]

    # Work products
    blocks: List[WeekBlock]
    parse: Optional[ParseResult]
    plan: Optional[ReconciliationPlan]
    report: Optional[PersistenceReport]

    status: RegenerationStatus
    status_history: Annotated[List[RegenerationStatus], operator.add]
    message: str
