from .base import RecordStore, TOPICS, RESOURCES, ROADMAPS
from .memory_store import InMemoryRecordStore

__all__ = ['RecordStore', 'InMemoryRecordStore', 'TOPICS', 'RESOURCES', 'ROADMAPS']
