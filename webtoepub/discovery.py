"""Book metadata and chapter list extraction from a novel's start page."""
import logging
import re
from functools import cmp_to_key
from typing import List, Sequence

from bs4 import BeautifulSoup, Tag

from .constants import ScraperConstants
from .errors import NoChaptersFound
from .models import BookMetadata, Chapter
from .rules import DEFAULT_RULES, SiteRuleSet
from .utils import clean_text, first_number, is_web_url, resolve_url

logger = logging.getLogger(__name__)

DESCRIPTION_SELECTORS = (
    'meta[property="og:description"]',
    '.description',
    '.summary',
    '.synopsis',
)

COVER_SELECTORS = (
    'meta[property="og:image"]',
    '.cover img',
    '.novel-cover img',
    '.story-cover img',
)

_CHAPTER_TEXT_RE = re.compile(r'ch\s*\d+|chapter\s*\d+', re.IGNORECASE)
_CHAPTER_HREF_RE = re.compile(r'ch\d+|chapter-\d+', re.IGNORECASE)


def _element_text(element: Tag) -> str:
    return clean_text(element.get_text()) or clean_text(element.get('content', ''))


def _first_text(soup: BeautifulSoup, selectors: Sequence[str]) -> str:
    for selector in selectors:
        for element in soup.select(selector):
            text = _element_text(element)
            if text:
                return text
    return ''


def extract_metadata(soup: BeautifulSoup, url: str, rules: SiteRuleSet) -> BookMetadata:
    metadata = BookMetadata()
    metadata.title = (_first_text(soup, rules.title_selectors)
                      or _first_text(soup, DEFAULT_RULES.title_selectors)
                      or ScraperConstants.DEFAULT_TITLE)
    metadata.author = (_first_text(soup, rules.author_selectors)
                       or _first_text(soup, DEFAULT_RULES.author_selectors))
    metadata.description = _first_text(soup, DESCRIPTION_SELECTORS)

    html_tag = soup.find('html')
    if html_tag is not None and html_tag.get('lang'):
        metadata.language = html_tag['lang'].split('-')[0].lower() or metadata.language

    for selector in COVER_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        source = element.get('src') or element.get('content')
        resolved = resolve_url(source, url) if source else None
        if resolved:
            metadata.cover_url = resolved
            break
    return metadata


def _is_usable_link(link: Tag, base_url: str) -> bool:
    return link.name == 'a' and is_web_url(resolve_url(link.get('href') or '', base_url))


def _select_links(soup: BeautifulSoup, selectors: Sequence[str], base_url: str) -> List[Tag]:
    for selector in selectors:
        links = [link for link in soup.select(selector) if _is_usable_link(link, base_url)]
        if links:
            logger.debug(f"Found {len(links)} links with selector: {selector}")
            return links
    return []


def _looks_like_chapter(link: Tag) -> bool:
    href = link.get('href') or ''
    if not href:
        return False
    text = link.get_text().lower()
    return bool(
        'chapter' in text
        or 'ch.' in text
        or _CHAPTER_TEXT_RE.search(text)
        or 'chapter' in href.lower()
        or _CHAPTER_HREF_RE.search(href)
    )


def _aggressive_scan(soup: BeautifulSoup, base_url: str) -> List[Tag]:
    return [link for link in soup.find_all('a', href=True)
            if _looks_like_chapter(link) and _is_usable_link(link, base_url)]


def find_chapter_links(soup: BeautifulSoup, rules: SiteRuleSet, base_url: str) -> List[Tag]:
    """Anchors with a web URL from the first strategy that yields any."""
    links = _select_links(soup, rules.chapter_selectors, base_url)
    if not links:
        logger.debug("Trying default chapter selectors")
        links = _select_links(soup, DEFAULT_RULES.chapter_selectors, base_url)
    if not links:
        logger.info("No chapters found with standard selectors, trying aggressive approach")
        links = _aggressive_scan(soup, base_url)
        logger.info(f"Found {len(links)} potential chapter links with aggressive approach")
    return links


def _compare_chapters(a: Chapter, b: Chapter) -> int:
    a_number = first_number(a.title)
    b_number = first_number(b.title)
    if a_number is not None and b_number is not None and a_number != b_number:
        return -1 if a_number < b_number else 1
    return a.index - b.index


def sort_chapters(chapters: List[Chapter]) -> List[Chapter]:
    """Order chapters by the first number in their titles, else by discovery order."""
    return sorted(chapters, key=cmp_to_key(_compare_chapters))


def discover_chapters(soup: BeautifulSoup, start_url: str, rules: SiteRuleSet) -> List[Chapter]:
    links = find_chapter_links(soup, rules, start_url)
    if not links:
        raise NoChaptersFound(start_url)

    chapters = []
    seen = set()
    for position, link in enumerate(links):
        absolute_url = resolve_url(link.get('href') or '', start_url)
        if not is_web_url(absolute_url) or absolute_url in seen:
            continue
        seen.add(absolute_url)
        title = clean_text(link.get_text()) or f"Chapter {position + 1}"
        chapters.append(Chapter(index=position, title=title, url=absolute_url, base_url=start_url))

    if not chapters:
        raise NoChaptersFound(start_url)

    logger.info(f"Extracted {len(chapters)} chapters")
    return sort_chapters(chapters)
