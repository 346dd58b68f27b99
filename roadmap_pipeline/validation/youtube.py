from typing import Optional, Tuple
from urllib.parse import SplitResult, parse_qs
import asyncio
import logging
import re

logger = logging.getLogger(__name__)

YOUTUBE_HOSTS = ("youtube.com", "youtu.be", "youtube-nocookie.com")
_VIDEO_ID_CHARS = re.compile(r'^[a-zA-Z0-9_-]+$')


def is_youtube_host(parts: SplitResult) -> bool:
    hostname = (parts.hostname or "").lower()
    return any(hostname == host or hostname.endswith("." + host) for host in YOUTUBE_HOSTS)


def is_video_link(parts: SplitResult) -> bool:
    """True for watch/share/embed/shorts links, False for channels, playlists, search."""
    if not is_youtube_host(parts):
        return False
    hostname = (parts.hostname or "").lower()
    if hostname.endswith("youtu.be"):
        return True
    path = parts.path or ""
    return path.startswith(("/watch", "/embed/", "/shorts/", "/v/", "/live/"))


def extract_video_id(parts: SplitResult) -> Optional[str]:
    """
    Extract the video id from a YouTube watch/share link.

    Handles:
    - https://www.youtube.com/watch?v=<id>
    - https://youtu.be/<id>
    - https://www.youtube.com/embed/<id>, /shorts/<id>, /v/<id>, /live/<id>

    Returns:
        The raw id, or None when no id-shaped value is present
    """
    hostname = (parts.hostname or "").lower()
    path = parts.path or ""

    if hostname.endswith("youtu.be"):
        candidate = path.lstrip("/").split("/")[0]
    elif path.startswith("/watch"):
        candidate = parse_qs(parts.query).get("v", [""])[0]
    else:
        segments = [s for s in path.split("/") if s]
        candidate = segments[1] if len(segments) > 1 else ""

    if not candidate or not _VIDEO_ID_CHARS.match(candidate):
        return None
    return candidate


class VideoStatusChecker:
    """
    Identifier-level availability check through the YouTube Data API.

    Fails closed: when the API is not configured or the call fails, the video
    is reported invalid rather than assumed available.
    """

    def __init__(self, config):
        self.config = config
        self.api_key = getattr(config, 'YOUTUBE_API_KEY', None)
        self._youtube_client = None

    @property
    def youtube_client(self):
        """Lazy load YouTube API client."""
        if self._youtube_client is None and self.api_key:
            try:
                from googleapiclient.discovery import build
                self._youtube_client = build('youtube', 'v3', developerKey=self.api_key, cache_discovery=False)
            except ImportError:
                logger.warning("google-api-python-client not installed")
        return self._youtube_client

    def is_available(self) -> bool:
        return self.youtube_client is not None

    def _fetch_status(self, video_id: str) -> Tuple[bool, Optional[str]]:
        response = self.youtube_client.videos().list(part="status", id=video_id).execute()
        items = response.get("items", [])
        if not items:
            return False, "Video not found"

        status = items[0].get("status", {})
        privacy = status.get("privacyStatus")
        upload = status.get("uploadStatus")
        if privacy != "public":
            return False, f"Video is {privacy or 'unavailable'}"
        if upload and upload != "processed":
            return False, f"Video is {upload}"
        return True, None

    async def check(self, video_id: str) -> Tuple[bool, Optional[str]]:
        """
        Check whether a video is public and processed.

        Returns:
            (is_valid, error) where error is None for valid videos
        """
        if not self.is_available():
            return False, "Video availability could not be verified"

        try:
            return await asyncio.to_thread(self._fetch_status, video_id)
        except Exception as e:
            logger.error(f"YouTube status lookup failed for {video_id}: {e}")
            return False, "Failed to validate YouTube video"
