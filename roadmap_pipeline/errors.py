"""Exception types shared across the pipeline."""


class RoadmapPipelineError(Exception):
    """Base class for pipeline errors."""


class StorageError(RoadmapPipelineError):
    """Raised by a record store when a write cannot be applied."""


class InvariantViolation(RoadmapPipelineError):
    """Raised when internal data breaks a structural guarantee (e.g. an orphan resource)."""
