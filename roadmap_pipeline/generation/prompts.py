"""
Prompt assembly for roadmap generation.

The heading grammar written here is the one MarkdownRoadmapParser reads back.
"""

from typing import List, Optional

from roadmap_pipeline.models.schemas import LearningPreferences, Topic

SYSTEM_PROMPT = (
    "You are an educational content creator who writes detailed learning roadmaps. "
    "Follow the markdown format you are given exactly. Start bullet points with \"- \" and do not "
    "add trailing characters such as \"#\" or extra periods. Tag every resource with its format "
    "(VIDEO/ARTICLE/BOOK/INTERACTIVE/COURSE), type (TUTORIAL/PROJECT/REFERENCE/COURSE) and cost "
    "(FREE or PAID with an approximate price). Only link to specific pages on established platforms "
    "and official documentation; never to homepages, placeholders or example URLs."
)

WEEK_FORMAT = """# Week X: Topic Title

Brief description of the week's focus

### Objectives:
- Specific learning goal related to the week's topic
- Specific learning goal related to the week's topic

### Resources:
- [FORMAT][TYPE][COST] "Resource Title" - How this resource helps with the objectives: URL
- [FORMAT][TYPE][COST] "Resource Title" - How this resource helps with the objectives: URL

### Exercise:
- A hands-on task that applies the week's objectives"""

BUDGET_FOCUS = {
    "free": "free resources",
    "paid": "high-quality paid resources",
}

FORMAT_FOCUS = {
    "video": "Primarily video content",
    "text": "Primarily written content",
}


def format_kept_topics(kept_topics: List[Topic]) -> str:
    """
    Render kept topics for the prompt, one ``- Title (ID: id)`` line each.

    The parser strips the ``(ID: ...)`` annotation if the model echoes it
    back in a week header.
    """
    if not kept_topics:
        return ""
    lines = "\n".join(f"- {t.title} (ID: {t.id})" for t in kept_topics)
    return (
        "The user wants to KEEP these topics from the current roadmap. Include them unchanged, "
        "though you may move them to a different week:\n" + lines
    )


def format_preferences(preferences: LearningPreferences) -> str:
    lines = [
        f"- Budget: {preferences.budget} (focus on {BUDGET_FOCUS.get(preferences.budget, 'a mix of free and paid resources')})",
        f"- Timeline: {preferences.timeline_months} months",
        f"- Current level: {preferences.skill_level}",
        f"- Learning format: {FORMAT_FOCUS.get(preferences.learning_format, 'Both videos and articles')}",
        f"- Resource type: {'Mix of courses, tutorials, and projects' if preferences.resource_type == 'all' else preferences.resource_type}",
    ]
    if preferences.hours_per_week:
        lines.append(f"- Hours available per week: {preferences.hours_per_week}")
    return "\n".join(lines)


def build_roadmap_prompt(
    goal: str,
    preferences: Optional[LearningPreferences] = None,
    feedback: Optional[str] = None,
    kept_topics: Optional[List[Topic]] = None,
    existing_roadmap: Optional[str] = None,
) -> str:
    """
    Build the user prompt for a new or regenerated roadmap.

    Args:
        goal: What the learner wants to achieve
        preferences: Budget, timeline and format preferences
        feedback: Learner feedback; switches the prompt to regeneration mode
        kept_topics: Topics to carry over unchanged
        existing_roadmap: Previous document, included when regenerating

    Returns:
        Prompt text
    """
    preferences = preferences or LearningPreferences()
    sections = []

    if feedback:
        sections.append(f"Based on the following feedback, regenerate the learning roadmap for: {goal}")
        sections.append(f"User feedback: {feedback}")
    else:
        sections.append(
            f"Create a complete learning roadmap that takes the learner from their current level "
            f"to proficiency in {goal}."
        )

    kept_text = format_kept_topics(kept_topics or [])
    if kept_text:
        sections.append(kept_text)

    if feedback and existing_roadmap:
        sections.append(f"Current roadmap:\n{existing_roadmap}")

    sections.append(f"Context:\n{format_preferences(preferences)}")
    sections.append(
        f"The roadmap must be realistic within {preferences.timeline_months} months at "
        f"{preferences.hours_per_week or 10} hours per week."
    )
    sections.append(f"Use this exact format for every week:\n\n{WEEK_FORMAT}")
    sections.append(
        "Formatting rules:\n"
        "1. Every week has Objectives, Resources and Exercise sections with \"###\" headings\n"
        "2. Start bullet points with \"- \"\n"
        "3. Resource URLs are complete, start with https:// and point directly at the content\n"
        "4. Keep each week's objectives, resources and exercises tightly related to its topic"
    )
    return "\n\n".join(sections)
