from .graph import create_regeneration_graph, run_regeneration
from .state import RegenerationState

__all__ = ['create_regeneration_graph', 'run_regeneration', 'RegenerationState']
