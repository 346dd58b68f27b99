from .markdown_parser import (
    MarkdownRoadmapParser, ParserState, WeekBlock, progression_for_skill, section_for_week
)

__all__ = ['MarkdownRoadmapParser', 'ParserState', 'WeekBlock', 'progression_for_skill', 'section_for_week']
