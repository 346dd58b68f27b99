from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List

Record = Dict[str, Any]
Predicate = Callable[[Record], bool]

TOPICS = "topics"
RESOURCES = "resources"
ROADMAPS = "roadmaps"


class RecordStore(ABC):
    """
    Keyed record store the pipeline persists into.

    Collections hold plain dicts with an ``id`` key. Resources reference their
    topic through ``topic_id``. Implementations raise ``StorageError`` when a
    write cannot be applied.
    """

    @abstractmethod
    async def insert_many(self, collection: str, records: List[Record]) -> None:
        """Insert records; all or none of them are written."""
        pass

    @abstractmethod
    async def delete_where(self, collection: str, predicate: Predicate) -> int:
        """Delete matching records and return how many were removed."""
        pass

    @abstractmethod
    async def select_where(self, collection: str, predicate: Predicate) -> List[Record]:
        """Return copies of the matching records."""
        pass

    @abstractmethod
    async def update_where(self, collection: str, predicate: Predicate, changes: Record) -> int:
        """Apply ``changes`` to matching records and return how many changed."""
        pass
