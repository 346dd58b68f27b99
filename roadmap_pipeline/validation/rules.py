"""
Deny-lists and placeholder heuristics consulted before any network call.

The list contents are data, not logic: defaults mirror links that have failed
before, and a JSON file (``URL_RULES_PATH``) can replace any of them::

    {
        "known_dead_urls": ["https://..."],
        "known_dead_video_ids": ["xfqh5MTb0SU"],
        "placeholder_domains": ["example.com"],
        "placeholder_tokens": ["unavailable"],
        "allowed_tlds": [".com", ".org"],
        "allowed_tld_infixes": [".co.", ".ac."]
    }
"""

import json
import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import SplitResult

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class UrlRules(BaseModel):
    """Immediate-reject tables for URL validation."""
    known_dead_urls: List[str] = Field(default_factory=lambda: [
        "https://www.youtube.com/watch?v=xfqh5MTb0SU",
        "https://www.tutorialspoint.com/sql/sql-dml-statements.htm",
        "https://developer.mozilla.org/en-US/docs/Learn/SQL/Introduction_to_SQL",
    ])
    known_dead_video_ids: List[str] = Field(default_factory=lambda: [
        "xfqh5MTb0SU",
        "dQw4w9WgXcQ",
        "video_id",
        "watch",
    ])
    placeholder_domains: List[str] = Field(default_factory=lambda: [
        "example.com",
        "example.org",
        "placeholder",
        "link.to",
        "mysite.com",
        "mypage.com",
        "yoursite.com",
        "domain.com",
    ])
    placeholder_tokens: List[str] = Field(default_factory=lambda: [
        "unavailable",
        "not-found",
        "removed",
        "expired",
    ])
    allowed_tlds: List[str] = Field(default_factory=lambda: [
        ".com", ".org", ".net", ".edu", ".gov", ".io", ".dev",
        ".ai", ".co", ".me", ".tv", ".info", ".app", ".be",
    ])
    allowed_tld_infixes: List[str] = Field(default_factory=lambda: [".co.", ".ac."])
    min_video_id_length: int = 8

    @classmethod
    def from_file(cls, path: str) -> "UrlRules":
        """Load rules from a JSON file; missing keys keep their defaults."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        logger.info(f"Loaded URL rules from {path}")
        return cls(**data)

    @classmethod
    def from_config(cls, config) -> "UrlRules":
        """Build rules from ``config.URL_RULES_PATH`` or fall back to defaults."""
        path = getattr(config, "URL_RULES_PATH", None)
        if path:
            return cls.from_file(path)
        return cls()

    def is_known_dead_url(self, url: str) -> bool:
        return url in self.known_dead_urls

    def is_known_dead_video(self, video_id: str) -> bool:
        return video_id in self.known_dead_video_ids

    def placeholder_reason(self, url: str, parts: SplitResult) -> Optional[str]:
        """
        Return why a URL looks like a placeholder, or None if it looks real.

        Args:
            url: Normalized URL
            parts: ``urlsplit`` of the same URL

        Returns:
            Short reason string, used as the ValidationResult error
        """
        hostname = (parts.hostname or "").lower()
        path = parts.path or ""
        lowered = url.lower()

        if any(domain in hostname for domain in self.placeholder_domains):
            return "Placeholder domain"
        if "[" in url or "]" in url:
            return "Unexpanded markdown in URL"
        if len(path) < 2:
            return "Homepage link without a path"
        if ".." in path or path.endswith("/undefined"):
            return "Malformed path"
        for token in self.placeholder_tokens:
            if token in lowered:
                return f"URL suggests content is {token}"
        has_tld = (
            any(hostname.endswith(tld) for tld in self.allowed_tlds)
            or any(infix in hostname for infix in self.allowed_tld_infixes)
        )
        if not has_tld:
            return "Disallowed top-level domain"
        return None
