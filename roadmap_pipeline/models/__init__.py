"""
Models module for roadmap structures.

Pydantic models shared by the parser, validator, reconciliation engine
and regeneration workflow.
"""

from roadmap_pipeline.models.schemas import (
    ResourceFormat,
    ResourceType,
    RegenerationStatus,
    Section,
    Topic,
    Resource,
    ValidationDetails,
    ValidationResult,
    BatchSummary,
    ParseResult,
    ReconciliationPlan,
    BatchFailure,
    PersistenceReport,
    RegenerationResult,
    LearningPreferences,
)

__all__ = [
    "ResourceFormat",
    "ResourceType",
    "RegenerationStatus",
    "Section",
    "Topic",
    "Resource",
    "ValidationDetails",
    "ValidationResult",
    "BatchSummary",
    "ParseResult",
    "ReconciliationPlan",
    "BatchFailure",
    "PersistenceReport",
    "RegenerationResult",
    "LearningPreferences",
]
