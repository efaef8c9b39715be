"""Link preview service: fetches title/description/image for a URL from a preview API."""
import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx

from services.video import VideoClassification, VideoProvider, classify_video_url

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (compatible; MindBox/1.0)'
DEFAULT_TIMEOUT = 10.0

DESCRIPTION_WORD_LIMIT = 15
ELLIPSIS = '...'
DEFAULT_TITLE = 'Untitled'
DEFAULT_DESCRIPTION = 'Quick memory note'
FALLBACK_DESCRIPTION = 'Memory bookmark for quick reference'
PLACEHOLDER_IMAGE = '/placeholder.svg?height=200&width=400'

_SCHEME_PATTERN = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*://')


@dataclass
class LinkPreview:
    """
    Preview metadata for a URL.

    Every field is resolved here, at the fetch boundary, so consumers never
    need to default missing values themselves.
    """

    title: str
    description: str
    image: str
    url: str
    is_video: bool = False
    video_provider: VideoProvider | None = None
    video_id: str | None = None

    @property
    def domain(self) -> str:
        """Host name of the preview URL ('' when it has none)."""
        return extract_domain(self.url)


def normalize_url(url: str) -> str:
    """Prefix https:// when the URL has no scheme."""
    url = url.strip()
    if _SCHEME_PATTERN.match(url):
        return url
    return f'https://{url}'


def extract_domain(url: str) -> str:
    """
    Return the host name of a URL, or '' if it has none.

    Pure function; malformed URLs yield '' rather than raising.
    """
    if not url:
        return ''
    try:
        return urlparse(url).hostname or ''
    except ValueError:
        return ''


def truncate_words(text: str, limit: int = DESCRIPTION_WORD_LIMIT) -> str:
    """
    Truncate text to at most `limit` whitespace-separated words.

    Text within the limit is returned unchanged. Longer text keeps the first
    `limit` words joined by single spaces, followed by the ellipsis marker.
    """
    words = text.split()
    if len(words) <= limit:
        return text
    return ' '.join(words[:limit]) + ELLIPSIS


def _with_video(preview: LinkPreview, video: VideoClassification) -> LinkPreview:
    preview.is_video = video.is_video
    preview.video_provider = video.provider
    preview.video_id = video.video_id
    return preview


def build_fallback_preview(raw_url: str, normalized_url: str) -> LinkPreview:
    """
    Build the placeholder preview used when the preview API is unavailable.

    The title is the URL's host name, or the raw input when no host can be
    extracted.
    """
    return LinkPreview(
        title=extract_domain(normalized_url) or raw_url,
        description=FALLBACK_DESCRIPTION,
        image=PLACEHOLDER_IMAGE,
        url=normalized_url,
    )


def parse_preview_payload(data: object, normalized_url: str) -> LinkPreview | None:
    """
    Build a preview from a preview API JSON body.

    Pure function with no I/O. Returns None when the body is not a JSON object.
    Missing or blank fields fall back to their defaults.
    """
    if not isinstance(data, dict):
        return None

    title = data.get('title')
    description = data.get('description')
    image = data.get('image')
    return LinkPreview(
        title=title.strip() if isinstance(title, str) and title.strip() else DEFAULT_TITLE,
        description=(
            truncate_words(description.strip())
            if isinstance(description, str) and description.strip()
            else DEFAULT_DESCRIPTION
        ),
        image=image if isinstance(image, str) and image else PLACEHOLDER_IMAGE,
        url=normalized_url,
    )


async def fetch_preview(
    url: str,
    api_url: str,
    api_key: str,
    timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
) -> LinkPreview:
    """
    Fetch preview metadata for a URL.

    Best-effort: never raises. Any failure (non-2xx status, timeout, transport
    error, unparseable body) resolves to a fallback preview built from the URL.

    Args:
        url:
            The URL as the user typed it; https:// is added when no scheme is present.
        api_url:
            Preview API endpoint.
        api_key:
            Preview API key, sent as the `key` query parameter.
        timeout:
            Request timeout in seconds.

    Returns:
        LinkPreview carrying the video classification of the normalized URL.
    """
    normalized = normalize_url(url)
    video = classify_video_url(normalized)

    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
        ) as client:
            response = await client.get(api_url, params={'key': api_key, 'q': normalized})

            if not response.is_success:
                logger.warning(
                    "Preview API returned HTTP %s for %s", response.status_code, normalized,
                )
                return _with_video(build_fallback_preview(url, normalized), video)

            preview = parse_preview_payload(response.json(), normalized)
    except httpx.TimeoutException:
        logger.warning("Preview API timed out for %s", normalized)
        return _with_video(build_fallback_preview(url, normalized), video)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("Preview API request failed for %s: %s", normalized, e)
        return _with_video(build_fallback_preview(url, normalized), video)
    except ValueError as e:
        # Malformed JSON body
        logger.warning("Preview API returned an unreadable body for %s: %s", normalized, e)
        return _with_video(build_fallback_preview(url, normalized), video)

    if preview is None:
        logger.warning("Preview API returned an unexpected body for %s", normalized)
        preview = build_fallback_preview(url, normalized)
    return _with_video(preview, video)
