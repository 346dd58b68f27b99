"""
Roadmap Pipeline - Learning Roadmap Regeneration Core

This package turns an LLM-generated weekly learning roadmap (markdown) into
validated topics and resources, and reconciles them with what is already
stored for the roadmap while preserving the topics the user chose to keep.

Main Modules:
- validation: URL liveness checks with caching, deny-lists and YouTube rules
- parsing: Line-oriented markdown roadmap parser
- resources: Fallback search resources and stored-resource revalidation
- reconcile: Keep-aware diff between stored and freshly parsed roadmaps
- storage: Record store collaborator interface and in-memory store
- generation: Prompt assembly and chat-model roadmap generation
- orchestrator: LangGraph regeneration workflow

Usage:
    from roadmap_pipeline.orchestrator import create_regeneration_graph, run_regeneration
    from roadmap_pipeline.storage import InMemoryRecordStore

    store = InMemoryRecordStore()
    graph = create_regeneration_graph(store, config)
    result = await run_regeneration(graph, roadmap_id="...", document=markdown)
"""

__version__ = "0.1.0"
__author__ = "Roadmap Pipeline Team"

__all__ = ["__version__", "__author__"]
