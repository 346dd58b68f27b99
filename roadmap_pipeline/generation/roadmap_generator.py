"""
Roadmap generation through a LangChain chat model.

The model is an opaque text producer: it receives the prompt from
``prompts.build_roadmap_prompt`` and returns one markdown document.
"""

from typing import List, Optional
import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from roadmap_pipeline.models.schemas import LearningPreferences, Topic
from .prompts import SYSTEM_PROMPT, build_roadmap_prompt

logger = logging.getLogger(__name__)


def create_llm(config) -> BaseChatModel:
    """Create a chat model for the configured provider."""
    provider = getattr(config, 'LLM_PROVIDER', 'google').lower()
    model_name = getattr(config, 'LLM_MODEL', 'gemini-2.5-flash')
    temperature = getattr(config, 'LLM_TEMPERATURE', 0)

    if provider == 'google':
        api_key = getattr(config, 'GOOGLE_API_KEY', None)
        if not api_key:
            raise ValueError("GOOGLE_API_KEY not set. Set it as an environment variable or in .env")

        from langchain_google_genai import ChatGoogleGenerativeAI
        logger.info(f"Using Google Gemini model: {model_name}")
        return ChatGoogleGenerativeAI(model=model_name, temperature=temperature, google_api_key=api_key)

    if provider == 'ollama':
        from langchain_ollama import ChatOllama
        logger.info(f"Using Ollama model: {model_name}")
        return ChatOllama(model=model_name, temperature=temperature)

    raise ValueError(f"Unsupported LLM_PROVIDER: {provider}")


def content_to_text(content) -> str:
    """
    Flatten chat-model content to plain text.

    Gemini returns lists of blocks like ``[{'type': 'text', 'text': '...'}]``;
    other providers return a string.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, dict):
        return content.get('text') or content.get('content') or ""
    if isinstance(content, list):
        parts = [content_to_text(item) for item in content if item is not None]
        return "".join(parts)
    return str(content) if content else ""


class RoadmapGenerator:
    """Produces roadmap markdown from learner goals and preferences."""

    def __init__(self, llm: BaseChatModel, config=None):
        self.llm = llm
        self.config = config

    async def generate(
        self,
        goal: str,
        preferences: Optional[LearningPreferences] = None,
        feedback: Optional[str] = None,
        kept_topics: Optional[List[Topic]] = None,
        existing_roadmap: Optional[str] = None,
    ) -> str:
        """
        Generate a roadmap document.

        Returns:
            Markdown text; empty when the model returned no content
        """
        prompt = build_roadmap_prompt(goal, preferences, feedback, kept_topics, existing_roadmap)
        logger.info(
            f"Generating roadmap for '{goal}' (regeneration={bool(feedback)}, kept={len(kept_topics or [])})"
        )
        response = await self.llm.ainvoke([SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)])
        document = content_to_text(getattr(response, 'content', response))
        logger.info(f"Generated roadmap document ({len(document)} characters)")
        return document
