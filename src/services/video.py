"""Video link classification for bookmarks."""
import re
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import urlparse


class VideoProvider(StrEnum):
    """Video hosts a bookmark can be classified under."""

    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    OTHER = "other"


YOUTUBE_DOMAINS = ("youtube.com", "youtu.be", "youtube-nocookie.com")
VIMEO_DOMAINS = ("vimeo.com",)
TWITTER_DOMAINS = ("twitter.com", "x.com")
LINKEDIN_DOMAINS = ("linkedin.com",)
OTHER_VIDEO_DOMAINS = ("dailymotion.com", "twitch.tv", "tiktok.com")
DIRECT_VIDEO_EXTENSIONS = (".mp4", ".webm", ".ogg", ".mov", ".m4v")

# Covers youtu.be/ID, /v/ID, /u/x/ID, /embed/ID, /shorts/ID and ?v=ID or &v=ID
_YOUTUBE_ID_PATTERN = re.compile(
    r"(?:youtu\.be/|/v/|/u/\w/|/embed/|/shorts/|[?&]v=)(?P<id>[A-Za-z0-9_-]{11})(?![A-Za-z0-9_-])",
)
_VIMEO_ID_PATTERN = re.compile(
    r"vimeo\.com/(?:channels/(?:\w+/)?|groups/[^/]*/videos/|album/\d+/video/|video/|)"
    r"(?P<id>\d+)(?:$|/|\?|#)",
)


@dataclass(frozen=True)
class VideoClassification:
    """Result of classifying a URL as a video link."""

    is_video: bool = False
    provider: VideoProvider | None = None
    video_id: str | None = None


NOT_A_VIDEO = VideoClassification()


def _host_matches(host: str, domains: tuple[str, ...]) -> bool:
    return any(host == domain or host.endswith(f".{domain}") for domain in domains)


def extract_youtube_id(url: str) -> str | None:
    """
    Extract the 11-character YouTube video id from any of the common URL shapes.

    Returns None when the URL carries no well-formed id.
    """
    match = _YOUTUBE_ID_PATTERN.search(url)
    if match:
        return match.group("id")
    return None


def extract_vimeo_id(url: str) -> str | None:
    """Extract the numeric Vimeo video id, or None."""
    match = _VIMEO_ID_PATTERN.search(url)
    return match.group("id") if match else None


def classify_video_url(url: str) -> VideoClassification:
    """
    Classify a URL as a video link.

    Pure function with no I/O. Known hosts are matched on the host name
    (including subdomains); anything else is a video only when its path ends
    with a direct video file extension, in which case no provider is set.

    Args:
        url: Absolute URL (with scheme) to classify.

    Returns:
        VideoClassification; NOT_A_VIDEO when nothing matches.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return NOT_A_VIDEO
    host = (parsed.hostname or "").lower()
    path = parsed.path.lower()

    if _host_matches(host, YOUTUBE_DOMAINS):
        video_id = extract_youtube_id(url)
        if video_id is None:
            return NOT_A_VIDEO
        return VideoClassification(True, VideoProvider.YOUTUBE, video_id)
    if _host_matches(host, VIMEO_DOMAINS):
        video_id = extract_vimeo_id(url)
        if video_id is None:
            return NOT_A_VIDEO
        return VideoClassification(True, VideoProvider.VIMEO, video_id)
    if _host_matches(host, TWITTER_DOMAINS):
        if "/status/" in path:
            return VideoClassification(True, VideoProvider.TWITTER)
        return NOT_A_VIDEO
    if _host_matches(host, LINKEDIN_DOMAINS):
        if "video" in path:
            return VideoClassification(True, VideoProvider.LINKEDIN)
        return NOT_A_VIDEO
    if _host_matches(host, OTHER_VIDEO_DOMAINS):
        return VideoClassification(True, VideoProvider.OTHER)
    if path.endswith(DIRECT_VIDEO_EXTENSIONS):
        return VideoClassification(is_video=True)
    return NOT_A_VIDEO


def embed_url(url: str, classification: VideoClassification) -> str | None:
    """
    Return the URL a player should frame for a classified video.

    YouTube and Vimeo ids map to their autoplaying embed players; other videos
    are framed at their own URL. Non-videos have no embed URL.
    """
    if not classification.is_video:
        return None
    if classification.provider == VideoProvider.YOUTUBE and classification.video_id:
        return f"https://www.youtube.com/embed/{classification.video_id}?autoplay=1"
    if classification.provider == VideoProvider.VIMEO and classification.video_id:
        return f"https://player.vimeo.com/video/{classification.video_id}?autoplay=1"
    return url
