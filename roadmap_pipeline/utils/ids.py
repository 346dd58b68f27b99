import uuid
from abc import ABC, abstractmethod


class IdGenerator(ABC):
    """Source of opaque record identifiers."""

    @abstractmethod
    def new_id(self) -> str:
        pass


class UuidGenerator(IdGenerator):
    """Random UUID4 identifiers (default in production)."""

    def new_id(self) -> str:
        return str(uuid.uuid4())


class SequentialIdGenerator(IdGenerator):
    """Deterministic ids like ``topic-1``, ``topic-2`` for tests and replays."""

    def __init__(self, prefix: str = "id"):
        self.prefix = prefix
        self._counter = 0

    def new_id(self) -> str:
        self._counter += 1
        return f"{self.prefix}-{self._counter}"
