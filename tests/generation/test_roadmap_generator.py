"""
Tests for generation/ - prompt assembly and roadmap generation
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, Mock
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from roadmap_pipeline.generation.prompts import build_roadmap_prompt, format_kept_topics
from roadmap_pipeline.generation.roadmap_generator import RoadmapGenerator, content_to_text, create_llm
from roadmap_pipeline.models.schemas import LearningPreferences
from roadmap_pipeline.parsing.parsers import clean_title
from conftest import make_topic


class TestPrompts:
    """Test prompt assembly"""

    def test_new_roadmap_prompt(self):
        prompt = build_roadmap_prompt("Python", LearningPreferences(budget="free", timeline_months=2))

        assert "proficiency in Python" in prompt
        assert "# Week X: Topic Title" in prompt
        assert "### Objectives:" in prompt
        assert "### Resources:" in prompt
        assert "### Exercise:" in prompt
        assert "focus on free resources" in prompt
        assert "2 months" in prompt
        assert "User feedback" not in prompt

    def test_regeneration_prompt(self):
        prompt = build_roadmap_prompt(
            "Python",
            feedback="More projects please",
            kept_topics=[make_topic("abc-123", "Intro to Loops")],
            existing_roadmap="# Week 1: Intro to Loops",
        )

        assert "regenerate the learning roadmap for: Python" in prompt
        assert "User feedback: More projects please" in prompt
        assert "- Intro to Loops (ID: abc-123)" in prompt
        assert "Current roadmap:\n# Week 1: Intro to Loops" in prompt

    def test_kept_topic_annotation_is_removed_by_parser(self):
        """Test the id annotation written to the prompt is stripped from echoed titles"""
        line = format_kept_topics([make_topic("abc-123", "Intro to Loops")]).splitlines()[-1]

        assert clean_title(line.lstrip("- ")) == "Intro to Loops"

    def test_no_kept_topics(self):
        assert format_kept_topics([]) == ""


class TestRoadmapGenerator:
    """Test RoadmapGenerator class"""

    @pytest.mark.asyncio
    async def test_generate(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=AIMessage(content="# Week 1: Intro"))
        generator = RoadmapGenerator(llm)

        document = await generator.generate("Python")

        assert document == "# Week 1: Intro"
        messages = llm.ainvoke.call_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)

    @pytest.mark.asyncio
    async def test_generate_with_content_blocks(self):
        """Test Gemini-style list content is flattened"""
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=AIMessage(content=[
            {"type": "text", "text": "# Week 1: Intro\n"},
            {"type": "text", "text": "Basics."},
        ]))

        document = await RoadmapGenerator(llm).generate("Python")

        assert document == "# Week 1: Intro\nBasics."

    def test_content_to_text(self):
        assert content_to_text("plain") == "plain"
        assert content_to_text({"text": "block"}) == "block"
        assert content_to_text(["a", {"text": "b"}, None]) == "ab"
        assert content_to_text(None) == ""

    def test_create_llm_requires_google_key(self):
        config = Mock()
        config.LLM_PROVIDER = "google"
        config.GOOGLE_API_KEY = None

        with pytest.raises(ValueError):
            create_llm(config)

    def test_create_llm_unknown_provider(self):
        config = Mock()
        config.LLM_PROVIDER = "nope"

        with pytest.raises(ValueError):
            create_llm(config)
