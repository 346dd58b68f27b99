"""
Pydantic models for roadmap structures.

Provides type-safe models for topics, resources, URL validation results,
parse output, reconciliation plans and regeneration outcomes.
"""

from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional
from pydantic import BaseModel, Field


class ResourceFormat(str, Enum):
    """Medium of a learning resource."""
    VIDEO = "video"
    ARTICLE = "article"
    BOOK = "book"
    INTERACTIVE = "interactive"
    COURSE = "course"
    OTHER = "other"


class ResourceType(str, Enum):
    """Pedagogical role of a learning resource."""
    TUTORIAL = "tutorial"
    PROJECT = "project"
    REFERENCE = "reference"
    COURSE = "course"
    OTHER = "other"


class RegenerationStatus(str, Enum):
    """States of one regeneration cycle."""
    IDLE = "idle"
    PARSING = "parsing"
    VALIDATING = "validating"
    RECONCILING = "reconciling"
    PERSISTING = "persisting"
    SUCCEEDED = "succeeded"
    PARTIALLY_FAILED = "partially_failed"
    REJECTED = "rejected"
    FAILED = "failed"


class Section(BaseModel):
    """Roadmap phase a topic belongs to."""
    name: str
    description: str = ""


class Topic(BaseModel):
    """One week-scale unit of a learning roadmap."""
    id: str
    roadmap_id: Optional[str] = None
    title: str
    description: str = ""
    objectives: List[str] = Field(default_factory=list)
    exercises: List[str] = Field(default_factory=list)
    week_number: int = Field(ge=1)
    sort_order: int = 0
    section: Section
    keep: bool = False
    completed: bool = False

    def to_record(self) -> Dict[str, Any]:
        """Plain dict for the record store."""
        return self.model_dump()


class Resource(BaseModel):
    """An externally linked learning material attached to a topic."""
    id: str
    topic_id: str
    roadmap_id: Optional[str] = None
    title: str
    description: str = ""
    url: str
    format: ResourceFormat = ResourceFormat.OTHER
    type: ResourceType = ResourceType.OTHER
    is_free: bool = True
    price: Optional[str] = None
    url_validated: Optional[bool] = None
    url_validated_at: Optional[datetime] = None
    url_status_code: Optional[int] = None
    url_error: Optional[str] = None
    is_fallback: bool = False

    def to_record(self) -> Dict[str, Any]:
        """Plain dict for the record store."""
        return self.model_dump()


class ValidationDetails(BaseModel):
    """Extra facts gathered while validating a URL."""
    is_youtube: bool = False
    is_video_available: Optional[bool] = None
    content_type: Optional[str] = None
    redirect_url: Optional[str] = None


class ValidationResult(BaseModel):
    """Trust verdict for a single URL."""
    url: str
    is_valid: bool
    status_code: Optional[int] = None
    error: Optional[str] = None
    validated_at: datetime
    details: ValidationDetails = Field(default_factory=ValidationDetails)


class BatchSummary(BaseModel):
    """Counts over a set of validation results."""
    results: List[ValidationResult]
    valid_count: int
    invalid_count: int


class ParseResult(BaseModel):
    """Output of one parse pass over a generated roadmap document."""
    topics: List[Topic] = Field(default_factory=list)
    resources: List[Resource] = Field(default_factory=list)
    invalid_resource_count: int = 0
    fallback_topic_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.topics

    def resources_for(self, topic_id: str) -> List[Resource]:
        return [r for r in self.resources if r.topic_id == topic_id]


class ReconciliationPlan(BaseModel):
    """Storage mutations needed to move a roadmap to its freshly parsed state."""
    roadmap_id: Optional[str] = None
    kept_topic_ids: List[str] = Field(default_factory=list)
    topics_to_delete: List[str] = Field(default_factory=list)
    topics_to_insert: List[Topic] = Field(default_factory=list)
    resources_to_delete: List[str] = Field(default_factory=list)
    resources_to_insert: List[Resource] = Field(default_factory=list)
    skipped_duplicate_titles: List[str] = Field(default_factory=list)


class BatchFailure(BaseModel):
    """One storage batch that could not be applied."""
    collection: str
    operation: str
    batch_index: int
    record_ids: List[str]
    error: str


class PersistenceReport(BaseModel):
    """Aggregate result of applying a reconciliation plan."""
    attempted_batches: int = 0
    insert_batches: int = 0
    failed_batches: List[BatchFailure] = Field(default_factory=list)
    inserted_topics: int = 0
    inserted_resources: int = 0
    deleted_topics: int = 0
    deleted_resources: int = 0
    deletes_skipped: bool = False

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed_batches)

    @property
    def total_failure(self) -> bool:
        """Every insert batch failed, so nothing new reached storage."""
        failed_inserts = sum(1 for f in self.failed_batches if f.operation == "insert")
        return self.insert_batches > 0 and failed_inserts == self.insert_batches


class RegenerationResult(BaseModel):
    """What the caller gets back from one regeneration cycle."""
    roadmap_id: str
    status: RegenerationStatus
    message: str
    raw_document: str
    parse: Optional[ParseResult] = None
    plan: Optional[ReconciliationPlan] = None
    report: Optional[PersistenceReport] = None

    @property
    def succeeded(self) -> bool:
        return self.status == RegenerationStatus.SUCCEEDED


class LearningPreferences(BaseModel):
    """Learner preferences passed to roadmap generation."""
    budget: str = "mixed"  # "free", "paid" or "mixed"
    timeline_months: int = Field(default=3, ge=1)
    skill_level: str = "beginner"
    learning_format: str = "both"  # "video", "text" or "both"
    resource_type: str = "all"
    hours_per_week: Optional[int] = None
