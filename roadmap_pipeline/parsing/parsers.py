"""
Line-level parsing utilities for generated roadmap documents.

Centralizes the small text rules the roadmap parser relies on: header
recognition, bullet stripping, title cleaning and resource-line matching.
"""

from typing import List, Optional, Tuple
import re

from roadmap_pipeline.models.schemas import ResourceFormat, ResourceType

WEEK_HEADER = re.compile(r'^\s*#{1,2}\s*Week\b\s*(\d+)?\s*[:.\-–—]?\s*(.*?)\s*#*\s*$', re.IGNORECASE)
SUBSECTION_HEADER = re.compile(r'^\s*(?:#{2,4}\s*|\*\*)\s*([A-Za-z][A-Za-z ]*?)\s*:?\s*(?:\*\*)?\s*:?\s*$')

OBJECTIVES_LABELS = {"objective", "objectives", "learning objectives", "goals", "learning goals"}
RESOURCES_LABELS = {"resource", "resources", "learning resources"}
EXERCISE_LABELS = {"exercise", "exercises", "practice", "project", "practical exercise", "hands-on exercise"}

ID_ANNOTATION = re.compile(r'\s*\(ID:?\s*[a-zA-Z0-9-]+\)\s*', re.IGNORECASE)
BULLET_MARKER = re.compile(r'^\s*(?:[-•*+]|\d{1,2}[.)])\s+')
CHECKBOX = re.compile(r'\[\s*[xX]?\s*\]\s*')
TRAILING_ARTIFACTS = re.compile(r'[\s#*_`~|]+$')
HORIZONTAL_RULE = re.compile(r'^\s*[-*_=]{3,}\s*$')
BOLD_WRAPPED = re.compile(r'^\*\*([^*]+)\*\*$')

RESOURCE_LINE = re.compile(
    r'^\s*(?:[-•*+]\s*)?'
    r'\[(VIDEO|ARTICLE|BOOK|INTERACTIVE|COURSE|OTHER)\]\s*'
    r'\[(TUTORIAL|PROJECT|REFERENCE|COURSE|OTHER)\]\s*'
    r'\[(FREE|PAID[^\]]*)\]\s*'
    r'["“]([^"”]+)["”]\s*[-–—]\s*'
    r'(.+?)\s*:\s*'
    r'((?:https?://|www\.)\S+)\s*$',
    re.IGNORECASE
)


def match_week_header(line: str) -> Optional[Tuple[Optional[int], str]]:
    """
    Recognize a ``# Week N: Title`` header.

    Returns:
        (declared week number or None, raw title) or None if not a week header
    """
    match = WEEK_HEADER.match(line)
    if not match:
        return None
    number = int(match.group(1)) if match.group(1) else None
    return number, match.group(2) or ""


def match_subsection(line: str) -> Optional[str]:
    """
    Classify a labeled subsection header.

    ``##`` headings always start a subsection. A bold-only line such as
    ``**Resources:**`` counts only when its label is a known one; any other
    bold line is content of the current subsection.

    Returns:
        "objectives", "resources", "exercise", "other" for an unrecognized
        heading, or None if the line is not a subsection header
    """
    stripped = line.strip()
    is_heading = stripped.startswith("#")
    if not (is_heading or stripped.startswith("**")):
        return None
    match = SUBSECTION_HEADER.match(stripped)
    if not match:
        return "other" if stripped.startswith("##") else None

    label = match.group(1).strip().lower()
    if label in OBJECTIVES_LABELS:
        return "objectives"
    if label in RESOURCES_LABELS:
        return "resources"
    if label in EXERCISE_LABELS:
        return "exercise"
    return "other" if is_heading else None


def clean_title(title: str) -> str:
    """Remove ``(ID: ...)`` annotations the generation step echoes back."""
    return ID_ANNOTATION.sub(' ', title).strip().strip('*').strip()


def strip_bullet(line: str) -> str:
    """
    Remove a leading bullet or number marker and any checkbox.

    Handles various bullet markers: -, •, *, +, 1., 2), etc. An item that
    is bold from end to end loses the ``**`` wrapping.
    """
    line = BULLET_MARKER.sub('', line.strip(), count=1)
    line = CHECKBOX.sub('', line).strip()
    return BOLD_WRAPPED.sub(r'\1', line).strip()


def trim_url(url: str) -> str:
    """
    Drop sentence punctuation glued to the end of a URL.

    A closing parenthesis is kept when it balances one inside the URL, as in
    ``https://en.wikipedia.org/wiki/Python_(programming_language)``.
    """
    while url:
        if url[-1] in ".,;":
            url = url[:-1]
        elif url[-1] == ")" and url.count(")") > url.count("("):
            url = url[:-1]
        else:
            break
    return url


def parse_list_item(line: str) -> Optional[str]:
    """One objective line, or None if nothing is left after cleaning."""
    if HORIZONTAL_RULE.match(line):
        return None
    item = strip_bullet(line)
    return item or None


def parse_exercise_item(line: str) -> Optional[str]:
    """One exercise line with trailing markdown debris (#, *, ``, ...) trimmed."""
    if HORIZONTAL_RULE.match(line):
        return None
    item = TRAILING_ARTIFACTS.sub('', strip_bullet(line))
    item = re.sub(r'\.{2,}$', '.', item)
    return item or None


def parse_cost(cost: str) -> Tuple[bool, Optional[str]]:
    """
    Parse a ``FREE`` / ``PAID $49`` tag.

    Returns:
        (is_free, price) where price is None for free or unpriced resources
    """
    cost = cost.strip()
    if cost.upper() == "FREE":
        return True, None
    price = cost[4:].strip() if cost.upper().startswith("PAID") else ""
    return False, price or None


def parse_resource_line(line: str) -> Optional[dict]:
    """
    Parse a structured resource line.

    Expected shape::

        - [VIDEO][TUTORIAL][FREE] "Title" - What it covers: https://...

    Returns:
        Dict with format, type, is_free, price, title, description, url, or
        None when the line does not follow the pattern
    """
    match = RESOURCE_LINE.match(line)
    if not match:
        return None

    fmt, rtype, cost, title, description, url = match.groups()
    is_free, price = parse_cost(cost)
    return {
        "format": ResourceFormat(fmt.lower()),
        "type": ResourceType(rtype.lower()),
        "is_free": is_free,
        "price": price,
        "title": title.strip(),
        "description": description.strip(),
        "url": trim_url(url.strip()),
    }


def join_paragraph(lines: List[str]) -> str:
    return " ".join(line.strip() for line in lines if line.strip())
