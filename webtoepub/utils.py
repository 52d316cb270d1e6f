import logging
import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r'\s+')
_NUMBER_RE = re.compile(r'\d+')
_FILENAME_INVALID_RE = re.compile(r'[<>:"/\\|?*]')


def clean_text(text: Optional[str]) -> str:
    if not text:
        return ''
    return _WHITESPACE_RE.sub(' ', text).strip()


def validate_url(url: str) -> bool:
    try:
        result = urlparse(url)
        return all([result.scheme in ('http', 'https'), result.netloc])
    except ValueError as e:
        logger.error(f"URL validation failed: {str(e)}")
        return False


def resolve_url(href: str, base_url: str) -> Optional[str]:
    """Resolve ``href`` against ``base_url``; None when it cannot be resolved."""
    href = (href or '').strip()
    if not href:
        return None
    try:
        resolved = urljoin(base_url, href)
        parsed = urlparse(resolved)
    except ValueError:
        return None
    if not parsed.scheme:
        return None
    return resolved


def is_web_url(url: Optional[str]) -> bool:
    return bool(url) and urlparse(url).scheme in ('http', 'https')


def first_number(text: str) -> Optional[int]:
    match = _NUMBER_RE.search(text or '')
    return int(match.group(0)) if match else None


def sanitize_filename(filename: str) -> str:
    filename = _FILENAME_INVALID_RE.sub('_', filename)
    filename = _WHITESPACE_RE.sub('_', filename)
    filename = re.sub(r'_{2,}', '_', filename)
    return filename.strip('_')


def parse_html(raw) -> BeautifulSoup:
    return BeautifulSoup(raw, 'html.parser')
