from typing import List, Optional
from urllib.parse import quote_plus
import logging

from roadmap_pipeline.models.schemas import Resource, ResourceFormat, ResourceType
from roadmap_pipeline.utils.clock import Clock, SystemClock
from roadmap_pipeline.utils.ids import IdGenerator, UuidGenerator

logger = logging.getLogger(__name__)


# (format, type, title template, description template, url template)
# {query} is the URL-encoded topic title
FALLBACK_TEMPLATES = [
    (
        ResourceFormat.VIDEO, ResourceType.TUTORIAL,
        "Free Tutorials on {title}",
        "Video tutorials about {title} on YouTube.",
        "https://www.youtube.com/results?search_query={query}+tutorial",
    ),
    (
        ResourceFormat.ARTICLE, ResourceType.REFERENCE,
        "Official Docs for {title} (Search)",
        "Documentation and reference material for {title}.",
        "https://developer.mozilla.org/en-US/search?q={query}",
    ),
    (
        ResourceFormat.ARTICLE, ResourceType.PROJECT,
        "GitHub Projects related to {title}",
        "Open-source repositories to study and practice {title}.",
        "https://github.com/search?q={query}&type=repositories",
    ),
    (
        ResourceFormat.COURSE, ResourceType.COURSE,
        "Courses on {title}",
        "Structured courses covering {title}.",
        "https://www.coursera.org/search?query={query}",
    ),
]


class FallbackResourceGenerator:
    """
    Builds search-link resources for a topic that has no validated resources.

    Links come from fixed search templates, so they always resolve and are
    marked validated without a network call. Output size is always
    ``len(FALLBACK_TEMPLATES)`` and in template order.
    """

    output_size = len(FALLBACK_TEMPLATES)

    def __init__(self, id_generator: Optional[IdGenerator] = None, clock: Optional[Clock] = None):
        self.id_generator = id_generator or UuidGenerator()
        self.clock = clock or SystemClock()

    def generate(
        self,
        topic_title: str,
        topic_description: str = "",
        topic_id: str = "",
        roadmap_id: Optional[str] = None,
    ) -> List[Resource]:
        """
        Create fallback resources for a topic.

        Args:
            topic_title: Cleaned topic title, used as the search query
            topic_description: Used when the title is blank
            topic_id: Owning topic id
            roadmap_id: Owning roadmap id

        Returns:
            Exactly ``output_size`` resources marked as validated
        """
        subject = topic_title.strip() or topic_description.strip()[:80] or "programming"
        query = quote_plus(subject)
        validated_at = self.clock.now()

        resources = []
        for fmt, rtype, title, description, url in FALLBACK_TEMPLATES:
            resources.append(Resource(
                id=self.id_generator.new_id(),
                topic_id=topic_id,
                roadmap_id=roadmap_id,
                title=title.format(title=subject),
                description=description.format(title=subject),
                url=url.format(query=query),
                format=fmt,
                type=rtype,
                is_free=True,
                url_validated=True,
                url_validated_at=validated_at,
                is_fallback=True,
            ))

        logger.debug(f"Generated {len(resources)} fallback resources for '{subject}'")
        return resources
