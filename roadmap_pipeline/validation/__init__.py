from .cache import ValidationCache
from .rules import UrlRules
from .youtube import VideoStatusChecker, extract_video_id
from .url_validator import UrlValidator

__all__ = ['ValidationCache', 'UrlRules', 'VideoStatusChecker', 'extract_video_id', 'UrlValidator']
