"""
Markdown roadmap parser.

Turns a generated weekly roadmap into Topic and Resource models:

    # Week 1: Title
    Description paragraph...
    ### Objectives:
    - ...
    ### Resources:
    - [VIDEO][TUTORIAL][FREE] "Title" - Description: https://...
    ### Exercise:
    - ...

The document is read line by line through a small state machine. Resource
URLs from the whole document are validated in one batched pass before any
resource is attached to a topic.
"""

from enum import Enum
from math import ceil
from typing import Dict, List, Optional, Tuple, Union
import logging

from pydantic import BaseModel, Field

from roadmap_pipeline.models.schemas import (
    ParseResult, Resource, ResourceFormat, ResourceType, Section, Topic, ValidationResult
)
from roadmap_pipeline.resources.fallback import FallbackResourceGenerator
from roadmap_pipeline.utils.ids import IdGenerator, UuidGenerator
from .parsers import (
    clean_title, join_paragraph, match_subsection, match_week_header,
    parse_exercise_item, parse_list_item, parse_resource_line
)

logger = logging.getLogger(__name__)

DEFAULT_SECTION_PROGRESSION = [
    ("Getting Started", "Initial concepts and fundamentals"),
    ("Core Concepts", "Essential skills and knowledge"),
    ("Practical Applications", "Hands-on projects and implementation"),
    ("Advanced Topics", "Specialized knowledge and expertise"),
]

# Skill keywords (matched as substrings of the lowercased goal) -> progression
SKILL_SECTION_PROGRESSIONS = [
    (("data", "analytics"), [
        ("Data Fundamentals", "Essential data concepts and tools"),
        ("Data Analysis", "Methods for analyzing and visualizing data"),
        ("Advanced Analytics", "Statistical methods and machine learning basics"),
        ("Specialization", "Specialized techniques and real-world applications"),
    ]),
    (("cloud", "aws", "azure"), [
        ("Cloud Foundations", "Fundamental cloud concepts and services"),
        ("Core Services", "Essential platform services and deployment"),
        ("Advanced Architecture", "Scalable and secure cloud solutions"),
        ("Optimization & DevOps", "Performance, automation, and continuous delivery"),
    ]),
    (("web", "frontend", "react"), [
        ("Web Fundamentals", "HTML, CSS, and JavaScript basics"),
        ("Interactive UI", "Building dynamic user interfaces"),
        ("Advanced Front-end", "State management, routing, and API integration"),
        ("Production Ready", "Performance, testing, and deployment"),
    ]),
]

SectionSpec = Union[str, Tuple[str, str]]


class ParserState(str, Enum):
    """Where the line reader currently is inside the document."""
    SEEKING_WEEK_HEADER = "seeking_week_header"
    IN_DESCRIPTION = "in_description"
    IN_OBJECTIVES = "in_objectives"
    IN_RESOURCES = "in_resources"
    IN_EXERCISE = "in_exercise"
    IN_OTHER_SECTION = "in_other_section"


SUBSECTION_STATES = {
    "objectives": ParserState.IN_OBJECTIVES,
    "resources": ParserState.IN_RESOURCES,
    "exercise": ParserState.IN_EXERCISE,
    "other": ParserState.IN_OTHER_SECTION,
}


class ResourceLine(BaseModel):
    """A resource line as written in the document, before validation."""
    format: ResourceFormat
    type: ResourceType
    is_free: bool
    price: Optional[str] = None
    title: str
    description: str
    url: str


class WeekBlock(BaseModel):
    """Raw content of one ``# Week N`` block."""
    position: int
    declared_week: Optional[int] = None
    title: str
    description_lines: List[str] = Field(default_factory=list)
    objectives: List[str] = Field(default_factory=list)
    exercises: List[str] = Field(default_factory=list)
    resources: List[ResourceLine] = Field(default_factory=list)
    unparsed_resource_lines: int = 0

    @property
    def week_number(self) -> int:
        """Declared week, or the block position when the number is missing."""
        if self.declared_week and self.declared_week >= 1:
            return self.declared_week
        return self.position

    @property
    def description(self) -> str:
        """First non-empty paragraph after the header."""
        paragraph: List[str] = []
        for line in self.description_lines:
            if line.strip():
                paragraph.append(line)
            elif paragraph:
                break
        return clean_title(join_paragraph(paragraph))


def as_section_specs(progression: Optional[List[SectionSpec]]) -> List[Tuple[str, str]]:
    """
    Normalize a progression to ``(name, description)`` pairs.

    Bare names take the description of the matching default section, or a
    generic one when there is none.
    """
    known = dict(DEFAULT_SECTION_PROGRESSION)
    for _, sections in SKILL_SECTION_PROGRESSIONS:
        known.update(sections)

    specs = []
    for item in progression or DEFAULT_SECTION_PROGRESSION:
        if isinstance(item, str):
            item = (item, known.get(item, f"{item} phase of your learning journey."))
        specs.append(tuple(item))
    return specs


def progression_for_skill(skill: Optional[str], default: Optional[List[SectionSpec]] = None) -> List[Tuple[str, str]]:
    """Pick the section progression for a skill or goal, first keyword match wins."""
    name = (skill or "").lower()
    for keywords, sections in SKILL_SECTION_PROGRESSIONS:
        if any(keyword in name for keyword in keywords):
            return list(sections)
    return as_section_specs(default)


def section_for_week(week_number: int, total_weeks: int, progression: List[SectionSpec]) -> Section:
    """
    Assign a section by splitting the weeks evenly across the progression.

    With 8 weeks and 4 sections, weeks 1-2 get the first section, 3-4 the
    second and so on. Weeks past the end stay in the last section.
    """
    specs = as_section_specs(progression)
    threshold = max(1, ceil(max(total_weeks, 1) / len(specs)))
    index = min((max(week_number, 1) - 1) // threshold, len(specs) - 1)
    name, description = specs[index]
    return Section(name=name, description=description)


class MarkdownRoadmapParser:
    """
    Parses generated roadmap documents into topics and validated resources.

    Parsing is split into three steps that ``parse`` runs in order:
    ``segment`` (pure text processing), one batched URL validation pass, and
    ``build`` (attach resources, fall back, assign identities).
    """

    def __init__(
        self,
        validator,
        fallback_generator: Optional[FallbackResourceGenerator] = None,
        id_generator: Optional[IdGenerator] = None,
        config=None,
    ):
        """
        Initialize the parser.

        Args:
            validator: UrlValidator (anything with an async ``validate_many``)
            fallback_generator: Builds resources for topics left with none
            id_generator: Source of new topic and resource ids
            config: Settings object; ``SECTION_PROGRESSION`` is the progression
                used when the skill matches none of the keyword tables
        """
        self.validator = validator
        self.id_generator = id_generator or UuidGenerator()
        self.fallback_generator = fallback_generator or FallbackResourceGenerator(self.id_generator)
        self.progression = as_section_specs(getattr(config, 'SECTION_PROGRESSION', None))

    def segment(self, document: str) -> List[WeekBlock]:
        """
        Split a document into week blocks.

        Text before the first week header is ignored. Blocks whose cleaned
        title was already seen (case-insensitive) are dropped, first wins.

        Args:
            document: Raw markdown

        Returns:
            Week blocks in document order
        """
        blocks: List[WeekBlock] = []
        seen_titles = set()
        current: Optional[WeekBlock] = None
        state = ParserState.SEEKING_WEEK_HEADER
        position = 0

        def close(block: Optional[WeekBlock]) -> None:
            if block is None:
                return
            key = block.title.lower()
            if key in seen_titles:
                logger.warning(f"Skipping duplicate topic: {block.title}")
                return
            seen_titles.add(key)
            blocks.append(block)

        for line in (document or "").splitlines():
            header = match_week_header(line)
            if header:
                close(current)
                position += 1
                declared_week, raw_title = header
                title = clean_title(raw_title) or f"Module {position}"
                current = WeekBlock(position=position, declared_week=declared_week, title=title)
                state = ParserState.IN_DESCRIPTION
                continue

            if state == ParserState.SEEKING_WEEK_HEADER:
                continue

            subsection = match_subsection(line)
            if subsection:
                state = SUBSECTION_STATES[subsection]
                continue

            if state == ParserState.IN_DESCRIPTION:
                current.description_lines.append(line)
            elif state == ParserState.IN_OBJECTIVES:
                item = parse_list_item(line)
                if item:
                    current.objectives.append(item)
            elif state == ParserState.IN_EXERCISE:
                item = parse_exercise_item(line)
                if item:
                    current.exercises.append(item)
            elif state == ParserState.IN_RESOURCES and line.strip():
                parsed = parse_resource_line(line)
                if parsed:
                    current.resources.append(ResourceLine(**parsed))
                else:
                    current.unparsed_resource_lines += 1
                    logger.debug(f"Ignoring unrecognized resource line: {line.strip()}")

        close(current)
        logger.info(f"Segmented roadmap into {len(blocks)} week blocks")
        return blocks

    @staticmethod
    def collect_urls(blocks: List[WeekBlock]) -> List[str]:
        """Distinct resource URLs across all blocks, in document order."""
        urls = [line.url for block in blocks for line in block.resources]
        return list(dict.fromkeys(urls))

    def build(
        self,
        blocks: List[WeekBlock],
        validation_results: Dict[str, ValidationResult],
        kept_topics: Optional[List[Topic]] = None,
        roadmap_id: Optional[str] = None,
        total_weeks_hint: Optional[int] = None,
        skill: Optional[str] = None,
    ) -> ParseResult:
        """
        Turn week blocks into topics and resources.

        Args:
            blocks: Output of ``segment``
            validation_results: Verdicts keyed by the URL as written
            kept_topics: Topics the user kept; matching titles reuse their id
                and completed flag
            roadmap_id: Roadmap the records belong to
            total_weeks_hint: Total week count for section thresholds
            skill: Skill or goal text; picks the section progression

        Returns:
            ParseResult with topics sorted by week number
        """
        if not blocks:
            return ParseResult()

        total_weeks = total_weeks_hint or max(len(blocks), max(b.week_number for b in blocks))
        kept_by_title = {topic.title.lower(): topic for topic in (kept_topics or [])}
        progression = progression_for_skill(skill, self.progression)
        ordered = sorted(blocks, key=lambda b: (b.week_number, b.position))

        result = ParseResult()
        for block in ordered:
            kept = kept_by_title.get(block.title.lower())
            topic = Topic(
                id=kept.id if kept else self.id_generator.new_id(),
                roadmap_id=roadmap_id,
                title=block.title,
                description=block.description,
                objectives=block.objectives,
                exercises=block.exercises,
                week_number=block.week_number,
                sort_order=block.week_number,
                section=section_for_week(block.week_number, total_weeks, progression),
                keep=kept is not None,
                completed=kept.completed if kept else False,
            )

            resources = []
            for line in block.resources:
                verdict = validation_results.get(line.url)
                if verdict is None or not verdict.is_valid:
                    result.invalid_resource_count += 1
                    reason = verdict.error if verdict else "not validated"
                    logger.warning(f"Dropping resource '{line.title}' ({line.url}): {reason}")
                    continue
                resources.append(Resource(
                    id=self.id_generator.new_id(),
                    topic_id=topic.id,
                    roadmap_id=roadmap_id,
                    title=line.title,
                    description=line.description,
                    url=verdict.url,
                    format=line.format,
                    type=line.type,
                    is_free=line.is_free,
                    price=line.price,
                    url_validated=True,
                    url_validated_at=verdict.validated_at,
                    url_status_code=verdict.status_code,
                    url_error=verdict.error,
                ))

            if not resources:
                logger.info(f"No valid resources for '{topic.title}', using fallback resources")
                resources = self.fallback_generator.generate(
                    topic.title, topic.description, topic_id=topic.id, roadmap_id=roadmap_id
                )
                result.fallback_topic_count += 1

            result.topics.append(topic)
            result.resources.extend(resources)

        logger.info(
            f"Parsed {len(result.topics)} topics and {len(result.resources)} resources "
            f"({result.invalid_resource_count} invalid, {result.fallback_topic_count} topics on fallback)"
        )
        return result

    async def parse(
        self,
        document: str,
        kept_topics: Optional[List[Topic]] = None,
        roadmap_id: Optional[str] = None,
        total_weeks_hint: Optional[int] = None,
        skill: Optional[str] = None,
    ) -> ParseResult:
        """
        Parse a document end to end.

        Never raises for malformed content; an unparseable document yields
        an empty ParseResult.
        """
        blocks = self.segment(document)
        urls = self.collect_urls(blocks)
        validation_results = await self.validator.validate_many(urls) if urls else {}
        return self.build(blocks, validation_results, kept_topics, roadmap_id, total_weeks_hint, skill)
