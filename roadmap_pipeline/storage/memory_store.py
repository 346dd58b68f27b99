from typing import Dict, List, Optional, Set, Tuple
import copy

from roadmap_pipeline.errors import StorageError
from .base import RESOURCES, ROADMAPS, TOPICS, Predicate, Record, RecordStore


class InMemoryRecordStore(RecordStore):
    """
    Dict-backed RecordStore.

    Deleting topics also deletes their resources. Inserting a resource whose
    topic does not exist raises StorageError.

    ``fail_on`` makes specific writes fail, for exercising partial failures:
    a set of ``(collection, operation)`` pairs, optionally narrowed to
    records with the given ids via ``fail_ids``.
    """

    def __init__(
        self,
        fail_on: Optional[Set[Tuple[str, str]]] = None,
        fail_ids: Optional[Set[str]] = None,
    ):
        self.collections: Dict[str, Dict[str, Record]] = {TOPICS: {}, RESOURCES: {}, ROADMAPS: {}}
        self.fail_on = fail_on or set()
        self.fail_ids = fail_ids
        self.calls: List[Tuple[str, str, int]] = []

    def _collection(self, name: str) -> Dict[str, Record]:
        return self.collections.setdefault(name, {})

    def _check_failure(self, collection: str, operation: str, ids: List[str]) -> None:
        if (collection, operation) not in self.fail_on:
            return
        if self.fail_ids is None or self.fail_ids.intersection(ids):
            raise StorageError(f"Simulated {operation} failure on {collection}")

    async def insert_many(self, collection: str, records: List[Record]) -> None:
        ids = [r["id"] for r in records]
        self.calls.append((collection, "insert", len(records)))
        self._check_failure(collection, "insert", ids)

        target = self._collection(collection)
        duplicates = [i for i in ids if i in target]
        if duplicates:
            raise StorageError(f"Duplicate ids in {collection}: {duplicates}")
        if collection == RESOURCES:
            topics = self._collection(TOPICS)
            missing = [r["topic_id"] for r in records if r.get("topic_id") not in topics]
            if missing:
                raise StorageError(f"Resources reference unknown topics: {missing}")

        for record in records:
            target[record["id"]] = copy.deepcopy(record)

    async def delete_where(self, collection: str, predicate: Predicate) -> int:
        target = self._collection(collection)
        ids = [i for i, r in target.items() if predicate(r)]
        self.calls.append((collection, "delete", len(ids)))
        self._check_failure(collection, "delete", ids)

        for record_id in ids:
            del target[record_id]

        if collection == TOPICS and ids:
            removed = set(ids)
            resources = self._collection(RESOURCES)
            for resource_id in [i for i, r in resources.items() if r.get("topic_id") in removed]:
                del resources[resource_id]
        return len(ids)

    async def select_where(self, collection: str, predicate: Predicate) -> List[Record]:
        return [copy.deepcopy(r) for r in self._collection(collection).values() if predicate(r)]

    async def update_where(self, collection: str, predicate: Predicate, changes: Record) -> int:
        target = self._collection(collection)
        ids = [i for i, r in target.items() if predicate(r)]
        self.calls.append((collection, "update", len(ids)))
        self._check_failure(collection, "update", ids)

        for record_id in ids:
            target[record_id].update(copy.deepcopy(changes))
        return len(ids)
