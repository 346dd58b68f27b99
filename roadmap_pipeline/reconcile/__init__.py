from .engine import ReconciliationEngine

__all__ = ['ReconciliationEngine']
