"""Chapter body extraction: selector chains first, text-density heuristic last."""
import logging
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, Tag

from .constants import Config, ScraperConstants
from .errors import ContentNotFound, ContentTooShort
from .models import Chapter
from .normalizer import normalize_fragment, text_length
from .rules import DEFAULT_RULES, SiteRuleSet

logger = logging.getLogger(__name__)

CANDIDATE_TAGS = ('article', 'div', 'section', 'main')

SKIP_PATTERNS = (
    'header', 'footer', 'sidebar', 'menu', 'nav', 'comment',
    'advertisement', 'breadcrumb', 'pagination', 'social',
)


def _select_first(soup: BeautifulSoup, selectors) -> Optional[Tag]:
    for selector in selectors:
        element = soup.select_one(selector)
        if element is not None:
            logger.debug(f"Found content with selector: {selector}")
            return element
    return None


def text_density(element: Tag) -> float:
    markup_length = len(element.decode_contents())
    if markup_length == 0:
        return 0.0
    return len(element.get_text().strip()) / markup_length


def _is_skipped(element: Tag) -> bool:
    classes = element.get('class') or []
    if isinstance(classes, str):
        classes = [classes]
    class_name = ' '.join(classes).lower()
    element_id = (element.get('id') or '').lower()
    return any(pattern in class_name or pattern in element_id for pattern in SKIP_PATTERNS)


def find_largest_text_block(soup: BeautifulSoup,
                            threshold: float = ScraperConstants.TEXT_DENSITY_THRESHOLD) -> Optional[Tag]:
    """Longest-text element among dense, non-chrome containers.

    Candidates whose class or id looks like page chrome are skipped, as are
    those whose text-to-markup ratio does not exceed ``threshold``. Ties go
    to the element that comes first in the document.
    """
    best_element = None
    best_length = 0
    for element in soup.find_all(CANDIDATE_TAGS):
        if _is_skipped(element):
            continue
        if text_density(element) <= threshold:
            continue
        length = len(element.get_text().strip())
        if length > best_length:
            best_length = length
            best_element = element
    return best_element


def _strategies(rules: SiteRuleSet, config: Config) -> List[Callable[[BeautifulSoup], Optional[Tag]]]:
    return [
        lambda soup: _select_first(soup, rules.content_selectors),
        lambda soup: _select_first(soup, DEFAULT_RULES.content_selectors),
        lambda soup: find_largest_text_block(soup, config.density_threshold),
    ]


def locate_content(soup: BeautifulSoup, rules: SiteRuleSet, config: Optional[Config] = None) -> Optional[Tag]:
    config = config or Config()
    for strategy in _strategies(rules, config):
        element = strategy(soup)
        if element is not None:
            return element
    return None


def extract_chapter(soup: BeautifulSoup, chapter: Chapter, rules: SiteRuleSet,
                    config: Optional[Config] = None) -> str:
    """Return the cleaned body markup of a chapter page.

    Raises ContentNotFound when no strategy selects an element and
    ContentTooShort when the cleaned text is below the configured minimum.
    """
    config = config or Config()
    element = locate_content(soup, rules, config)
    if element is None:
        raise ContentNotFound(chapter.url)

    content = normalize_fragment(element, chapter.url)
    length = text_length(content)
    if length < config.min_content_length:
        raise ContentTooShort(chapter.url, length, config.min_content_length)
    return content


def apply_extraction(chapter: Chapter, soup: BeautifulSoup, rules: SiteRuleSet,
                     config: Optional[Config] = None) -> str:
    content = extract_chapter(soup, chapter, rules, config)
    chapter.mark_completed(content)
    return content
