"""
Tests for validation/url_validator.py - URL liveness checks
"""
import pytest
import requests
from unittest.mock import AsyncMock, Mock, patch

from roadmap_pipeline.validation.url_validator import UrlValidator, describe_status
from conftest import make_response

HEAD = 'roadmap_pipeline.validation.url_validator.requests.head'
GET = 'roadmap_pipeline.validation.url_validator.requests.get'


@pytest.fixture
def validator(mock_config, clock):
    """Validator with a video checker that reports every video as public"""
    video_checker = Mock()
    video_checker.check = AsyncMock(return_value=(True, None))
    return UrlValidator(mock_config, video_checker=video_checker, clock=clock)


class TestDescribeStatus:
    """Test HTTP status descriptions"""

    def test_descriptions(self):
        assert describe_status(200) is None
        assert describe_status(404) == "Page not found"
        assert describe_status(403) == "Access forbidden"
        assert describe_status(503) == "Server error"
        assert describe_status(410) == "HTTP error 410"


class TestUrlValidator:
    """Test UrlValidator.validate"""

    @pytest.mark.asyncio
    async def test_valid_page(self, validator):
        """Test a page answering 200"""
        with patch(HEAD, return_value=make_response(200, "text/html; charset=utf-8")) as mock_head:
            result = await validator.validate("https://docs.python.org/3/tutorial/")

        assert result.is_valid is True
        assert result.status_code == 200
        assert result.error is None
        assert result.details.content_type == "text/html; charset=utf-8"
        assert mock_head.call_args.kwargs["timeout"] == 5
        assert mock_head.call_args.kwargs["headers"] == {"User-Agent": "test-agent"}

    @pytest.mark.asyncio
    async def test_scheme_is_added(self, validator):
        """Test URLs without a scheme are probed over https"""
        with patch(HEAD, return_value=make_response(200)) as mock_head:
            result = await validator.validate("docs.python.org/3/tutorial/")

        assert mock_head.call_args.args[0] == "https://docs.python.org/3/tutorial/"
        assert result.url == "https://docs.python.org/3/tutorial/"

    @pytest.mark.asyncio
    async def test_uppercase_scheme_is_recognized(self, validator):
        with patch(HEAD, return_value=make_response(200)) as mock_head:
            result = await validator.validate("HTTPS://docs.python.org/3/")

        assert result.is_valid is True
        assert result.url == "https://docs.python.org/3/"
        assert mock_head.call_args.args[0] == "https://docs.python.org/3/"

    @pytest.mark.parametrize("url,expected", [
        ("Http://realpython.com/intro/", "http://realpython.com/intro/"),
        ("  https://realpython.com/  ", "https://realpython.com/"),
        ("realpython.com/intro/", "https://realpython.com/intro/"),
    ])
    def test_normalize(self, url, expected):
        assert UrlValidator.normalize(url) == expected

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, validator):
        """Test that a 404 is final on the first answer"""
        with patch(HEAD, return_value=make_response(404)) as mock_head:
            result = await validator.validate("https://docs.python.org/3/missing.html")

        assert result.is_valid is False
        assert result.status_code == 404
        assert result.error == "Page not found"
        assert mock_head.call_count == 1

    @pytest.mark.asyncio
    async def test_get_after_refused_head(self, validator):
        """Test GET is used when the server refuses HEAD"""
        with patch(HEAD, return_value=make_response(405)), \
                patch(GET, return_value=make_response(200)) as mock_get:
            result = await validator.validate("https://www.udemy.com/course/python-course/")

        assert result.is_valid is True
        assert result.status_code == 200
        assert mock_get.call_args.kwargs["stream"] is True

    @pytest.mark.asyncio
    async def test_redirect_is_recorded(self, validator):
        """Test the final URL is kept when the probe was redirected"""
        response = make_response(200, url="https://docs.python.org/3.12/", history=[make_response(301)])
        with patch(HEAD, return_value=response):
            result = await validator.validate("https://docs.python.org/3/")

        assert result.details.redirect_url == "https://docs.python.org/3.12/"

    @pytest.mark.asyncio
    async def test_transient_errors_are_retried(self, validator):
        """Test timeouts are retried and a later success wins"""
        side_effect = [requests.Timeout(), requests.ConnectionError("reset"), make_response(200)]
        with patch(HEAD, side_effect=side_effect) as mock_head:
            result = await validator.validate("https://realpython.com/python-basics/")

        assert result.is_valid is True
        assert mock_head.call_count == 3

    @pytest.mark.asyncio
    async def test_retries_are_bounded(self, validator):
        """Test that exhausted retries produce an invalid result"""
        with patch(HEAD, side_effect=requests.Timeout()) as mock_head:
            result = await validator.validate("https://realpython.com/python-basics/")

        assert result.is_valid is False
        assert result.error == "Request timeout"
        assert mock_head.call_count == 3

    @pytest.mark.asyncio
    async def test_validation_is_cached(self, validator):
        """Test the second lookup within the window makes no network call"""
        with patch(HEAD, return_value=make_response(200)) as mock_head:
            first = await validator.validate("https://docs.python.org/3/library/")
            second = await validator.validate("https://docs.python.org/3/library/")

        assert first == second
        assert mock_head.call_count == 1

    @pytest.mark.asyncio
    async def test_cache_expires(self, validator, clock):
        """Test a result older than the window is probed again"""
        with patch(HEAD, return_value=make_response(200)) as mock_head:
            await validator.validate("https://docs.python.org/3/library/")
            clock.advance(hours=24)
            await validator.validate("https://docs.python.org/3/library/")

        assert mock_head.call_count == 2

    @pytest.mark.asyncio
    async def test_known_dead_url(self, validator):
        """Test deny-listed URLs are rejected without a network call"""
        with patch(HEAD) as mock_head:
            result = await validator.validate("https://www.tutorialspoint.com/sql/sql-dml-statements.htm")

        assert result.is_valid is False
        assert result.status_code == 404
        assert result.error == "Known broken link"
        mock_head.assert_not_called()

    @pytest.mark.asyncio
    async def test_known_dead_video(self, validator):
        """Test deny-listed video ids are rejected"""
        result = await validator.validate("https://youtu.be/xfqh5MTb0SU")

        assert result.is_valid is False
        assert result.error == "Known unavailable YouTube video"
        validator.video_checker.check.assert_not_called()

    @pytest.mark.asyncio
    async def test_placeholder_url(self, validator):
        """Test placeholder URLs are rejected without a network call"""
        with patch(HEAD) as mock_head:
            result = await validator.validate("https://example.com/python-course")

        assert result.is_valid is False
        assert result.error == "Placeholder domain"
        mock_head.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch",
        "https://www.youtube.com/watch?v=",
        "https://youtu.be/abc",
    ])
    async def test_video_without_usable_id_is_invalid(self, validator, url):
        """Test video links with a missing or short id are never valid"""
        result = await validator.validate(url)

        assert result.is_valid is False
        assert result.error == "Invalid YouTube video ID"
        assert result.details.is_youtube is True

    @pytest.mark.asyncio
    async def test_video_uses_status_checker(self, validator):
        """Test video links are checked by id, not by HTTP status"""
        with patch(HEAD) as mock_head:
            result = await validator.validate("https://www.youtube.com/watch?v=rfscVS0vtbw")

        assert result.is_valid is True
        assert result.details.is_video_available is True
        validator.video_checker.check.assert_awaited_once_with("rfscVS0vtbw")
        mock_head.assert_not_called()

    @pytest.mark.asyncio
    async def test_video_fails_closed_without_api(self, mock_config, clock):
        """Test videos are invalid when availability cannot be checked"""
        validator = UrlValidator(mock_config, clock=clock)

        result = await validator.validate("https://www.youtube.com/watch?v=rfscVS0vtbw")

        assert result.is_valid is False
        assert result.details.is_video_available is False

    @pytest.mark.asyncio
    async def test_youtube_search_page_is_probed(self, validator):
        """Test non-video YouTube pages go through the HTTP probe"""
        with patch(HEAD, return_value=make_response(200)) as mock_head:
            result = await validator.validate("https://www.youtube.com/results?search_query=python")

        assert result.is_valid is True
        assert mock_head.call_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url,error", [
        ("", "Empty URL"),
        ("   ", "Empty URL"),
        ("not a url", "Invalid URL format"),
        ("https://localhost/page", "Invalid URL format"),
    ])
    async def test_malformed_urls(self, validator, url, error):
        """Test malformed input gives an invalid result instead of raising"""
        result = await validator.validate(url)

        assert result.is_valid is False
        assert result.error == error


class TestUrlValidatorBatch:
    """Test batched validation"""

    @pytest.mark.asyncio
    async def test_batch_returns_result_per_url(self, validator):
        """Test a batch maps every input URL to its result"""
        urls = ["https://docs.python.org/3/a", "https://docs.python.org/3/b"]
        with patch(HEAD, return_value=make_response(200)):
            results = await validator.validate_batch(urls)

        assert set(results) == set(urls)
        assert all(r.is_valid for r in results.values())

    @pytest.mark.asyncio
    async def test_duplicates_probed_once(self, validator):
        """Test repeated URLs within a batch are validated once"""
        urls = ["https://docs.python.org/3/a"] * 3
        with patch(HEAD, return_value=make_response(200)) as mock_head:
            results = await validator.validate_batch(urls)

        assert len(results) == 1
        assert mock_head.call_count == 1

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, validator):
        """Test one failing URL does not affect the others"""
        def head(url, **kwargs):
            if url.endswith("/boom"):
                raise RuntimeError("unexpected")
            if url.endswith("/bad"):
                raise requests.RequestException("invalid header")
            return make_response(200)

        urls = ["https://docs.python.org/3/ok", "https://docs.python.org/3/boom", "https://docs.python.org/3/bad"]
        with patch(HEAD, side_effect=head):
            results = await validator.validate_batch(urls)

        assert results["https://docs.python.org/3/ok"].is_valid is True
        assert results["https://docs.python.org/3/boom"].is_valid is False
        assert results["https://docs.python.org/3/boom"].error == "unexpected"
        assert results["https://docs.python.org/3/bad"].error == "invalid header"

    @pytest.mark.asyncio
    async def test_batch_cap_enforced(self, validator):
        """Test that more than the cap in one batch is refused"""
        urls = [f"https://docs.python.org/3/page{i}" for i in range(26)]

        with pytest.raises(ValueError):
            await validator.validate_batch(urls)

    @pytest.mark.asyncio
    async def test_validate_many_splits_into_capped_batches(self, validator):
        """Test 30 URLs with a cap of 25 need exactly two batch calls"""
        urls = [f"https://docs.python.org/3/page{i}" for i in range(30)]
        sizes = []
        original = validator.validate_batch

        async def spy(batch):
            sizes.append(len(batch))
            return await original(batch)

        with patch(HEAD, return_value=make_response(200)), \
                patch.object(validator, "validate_batch", side_effect=spy):
            results = await validator.validate_many(urls)

        assert sizes == [25, 5]
        assert validator.batch_calls == 2
        assert len(results) == 30

    def test_summarize(self, validator, clock):
        """Test valid and invalid counts"""
        from conftest import make_result
        results = {
            "a": make_result("a", True, clock),
            "b": make_result("b", False, clock),
            "c": make_result("c", True, clock),
        }

        summary = validator.summarize(results)

        assert summary.valid_count == 2
        assert summary.invalid_count == 1
