from typing import Dict, List, Optional
from urllib.parse import urlsplit
import asyncio
import logging

import requests

from roadmap_pipeline.models.schemas import BatchSummary, ValidationDetails, ValidationResult
from roadmap_pipeline.utils.clock import Clock, SystemClock
from .cache import ValidationCache
from .rules import UrlRules
from .youtube import VideoStatusChecker, extract_video_id, is_video_link, is_youtube_host

logger = logging.getLogger(__name__)


def describe_status(status_code: int) -> Optional[str]:
    """Human-readable error for a non-2xx status, None for success."""
    if 200 <= status_code < 300:
        return None
    if status_code == 404:
        return "Page not found"
    if status_code == 403:
        return "Access forbidden"
    if status_code >= 500:
        return "Server error"
    return f"HTTP error {status_code}"


class UrlValidator:
    """
    Determines whether a learning-resource link is alive and trustworthy.

    Pipeline per URL:
    1. Normalize (add https://) and reject malformed URLs
    2. Reject entries from the known-dead URL and video-id tables
    3. Reject placeholder-looking URLs (example domains, brackets, bare homepages...)
    4. YouTube watch/share links: extract the id, ask the YouTube Data API (fail-closed)
    5. Everything else: HEAD probe, GET when HEAD is refused, retry transient errors

    Every final verdict is cached. Nothing in here raises for a bad URL; the
    outcome is always a ValidationResult.
    """

    def __init__(
        self,
        config,
        cache: Optional[ValidationCache] = None,
        rules: Optional[UrlRules] = None,
        video_checker: Optional[VideoStatusChecker] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config
        self.timeout = getattr(config, 'URL_PROBE_TIMEOUT', 10)
        self.retries = getattr(config, 'URL_PROBE_RETRIES', 2)
        self.backoff = getattr(config, 'URL_RETRY_BACKOFF', 0.5)
        self.batch_size = getattr(config, 'URL_BATCH_SIZE', 25)
        self.user_agent = getattr(
            config, 'URL_USER_AGENT', "Mozilla/5.0 (compatible; RoadmapPipeline/1.0)"
        )
        self.clock = clock or SystemClock()
        self.cache = cache or ValidationCache(
            ttl_seconds=getattr(config, 'URL_CACHE_TTL_SECONDS', 24 * 60 * 60),
            clock=self.clock,
        )
        self.rules = rules or UrlRules.from_config(config)
        self.video_checker = video_checker or VideoStatusChecker(config)
        self.probe_count = 0
        self.batch_calls = 0

    @staticmethod
    def normalize(url: str) -> str:
        """Trim, lowercase the scheme, and prepend https:// when no scheme is present."""
        cleaned = url.strip()
        scheme, sep, rest = cleaned.partition("://")
        if sep and scheme.lower() in ("http", "https"):
            return f"{scheme.lower()}://{rest}"
        return "https://" + cleaned

    def _result(self, url: str, is_valid: bool, details: ValidationDetails = None, **kwargs) -> ValidationResult:
        return ValidationResult(
            url=url,
            is_valid=is_valid,
            validated_at=self.clock.now(),
            details=details or ValidationDetails(),
            **kwargs
        )

    async def validate(self, url: str) -> ValidationResult:
        """
        Validate a single URL, consulting the cache first.

        Args:
            url: URL as it appeared in the source document

        Returns:
            ValidationResult (cached for the configured expiry window)
        """
        cached = await self.cache.get(url)
        if cached is not None:
            logger.debug(f"Using cached validation result for {url}")
            return cached

        result = await self._validate_uncached(url)
        await self.cache.set(url, result)
        return result

    async def validate_batch(self, urls: List[str]) -> Dict[str, ValidationResult]:
        """
        Validate up to ``batch_size`` URLs concurrently.

        Duplicate URLs in the batch are probed once. A failure on one URL is
        recorded in its own result and never aborts the rest of the batch.

        Raises:
            ValueError: if more than ``batch_size`` URLs are passed
        """
        if len(urls) > self.batch_size:
            raise ValueError(
                f"Batch of {len(urls)} URLs exceeds the cap of {self.batch_size}; "
                "split it with validate_many()"
            )

        self.batch_calls += 1
        unique_urls = list(dict.fromkeys(urls))
        logger.info(f"Processing batch request for {len(unique_urls)} URLs")

        outcomes = await asyncio.gather(
            *(self.validate(url) for url in unique_urls),
            return_exceptions=True
        )

        results: Dict[str, ValidationResult] = {}
        for url, outcome in zip(unique_urls, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Unexpected error validating {url}: {outcome}")
                outcome = self._result(self.normalize(url), False, error=str(outcome) or "Unknown error")
            results[url] = outcome
        return results

    async def validate_many(self, urls: List[str]) -> Dict[str, ValidationResult]:
        """Validate any number of URLs as consecutive cap-sized batches."""
        unique_urls = list(dict.fromkeys(urls))
        if not unique_urls:
            return {}

        batches = [
            unique_urls[i:i + self.batch_size]
            for i in range(0, len(unique_urls), self.batch_size)
        ]
        logger.info(f"Validating {len(unique_urls)} URLs in {len(batches)} batches...")

        results: Dict[str, ValidationResult] = {}
        for batch in batches:
            results.update(await self.validate_batch(batch))

        summary = self.summarize(results)
        logger.info(
            f"Completed URL validation. Valid: {summary.valid_count}, Invalid: {summary.invalid_count}"
        )
        return results

    @staticmethod
    def summarize(results: Dict[str, ValidationResult]) -> BatchSummary:
        values = list(results.values())
        valid_count = sum(1 for r in values if r.is_valid)
        return BatchSummary(results=values, valid_count=valid_count, invalid_count=len(values) - valid_count)

    async def _validate_uncached(self, url: str) -> ValidationResult:
        if not url or not url.strip():
            return self._result(url, False, error="Empty URL")

        normalized = self.normalize(url)
        try:
            parts = urlsplit(normalized)
            if not parts.hostname or " " in normalized or "." not in parts.hostname:
                raise ValueError("missing or malformed host")
        except ValueError:
            return self._result(normalized, False, error="Invalid URL format")

        details = ValidationDetails(is_youtube=is_youtube_host(parts))
        video_link = is_video_link(parts)
        video_id = extract_video_id(parts) if video_link else None

        # Immediate-reject tables
        if self.rules.is_known_dead_url(normalized):
            logger.info(f"Rejecting known broken link: {normalized}")
            return self._result(normalized, False, details, status_code=404, error="Known broken link")
        if video_id and self.rules.is_known_dead_video(video_id):
            details.is_video_available = False
            logger.info(f"Rejecting known unavailable video {video_id}")
            return self._result(normalized, False, details, error="Known unavailable YouTube video")

        reason = self.rules.placeholder_reason(normalized, parts)
        if reason:
            logger.info(f"Rejecting URL with invalid pattern ({reason}): {normalized}")
            return self._result(normalized, False, details, error=reason)

        if video_link:
            return await self._validate_video(normalized, video_id, details)

        return await self._probe(normalized, details)

    async def _validate_video(self, url: str, video_id: Optional[str], details: ValidationDetails) -> ValidationResult:
        if not video_id or len(video_id) < self.rules.min_video_id_length:
            details.is_video_available = False
            return self._result(url, False, details, error="Invalid YouTube video ID")

        is_valid, error = await self.video_checker.check(video_id)
        details.is_video_available = is_valid
        return self._result(url, is_valid, details, error=error)

    def _head(self, url: str) -> requests.Response:
        return requests.head(
            url,
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
            allow_redirects=True
        )

    def _get(self, url: str) -> requests.Response:
        response = requests.get(
            url,
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
            allow_redirects=True,
            stream=True
        )
        response.close()
        return response

    async def _probe(self, url: str, details: ValidationDetails) -> ValidationResult:
        """
        HTTP liveness probe with retries on transient errors only.

        Timeouts and connection errors are retried after a fixed backoff;
        HTTP status codes (4xx/5xx) are final on the first answer.
        """
        last_error = "Failed to fetch URL"
        for attempt in range(self.retries + 1):
            try:
                self.probe_count += 1
                response = await asyncio.to_thread(self._head, url)
                # Some servers refuse HEAD; ask again with GET
                if response.status_code in (403, 405):
                    response = await asyncio.to_thread(self._get, url)
            except requests.Timeout:
                last_error = "Request timeout"
            except requests.ConnectionError as e:
                last_error = f"Connection error: {e}"
            except requests.RequestException as e:
                return self._result(url, False, details, error=str(e) or "Failed to fetch URL")
            else:
                content_type = response.headers.get("content-type")
                if content_type:
                    details.content_type = content_type
                if response.history:
                    details.redirect_url = response.url
                return self._result(
                    url,
                    200 <= response.status_code < 300,
                    details,
                    status_code=response.status_code,
                    error=describe_status(response.status_code),
                )

            if attempt < self.retries:
                logger.debug(f"Retrying {url} after transient error ({last_error}), attempt {attempt + 1}")
                await asyncio.sleep(self.backoff)

        logger.warning(f"Giving up on {url}: {last_error}")
        return self._result(url, False, details, error=last_error)
