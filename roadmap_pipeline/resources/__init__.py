from .fallback import FallbackResourceGenerator
from .revalidator import ResourceRevalidator, RevalidationReport

__all__ = ['FallbackResourceGenerator', 'ResourceRevalidator', 'RevalidationReport']
