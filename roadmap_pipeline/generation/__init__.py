from .prompts import build_roadmap_prompt
from .roadmap_generator import RoadmapGenerator, create_llm

__all__ = ['build_roadmap_prompt', 'RoadmapGenerator', 'create_llm']
