"""Per-site CSS selector tables used to locate metadata, chapter links and chapter bodies."""
from dataclasses import dataclass
from typing import Dict, Tuple
from urllib.parse import urlparse


@dataclass(frozen=True)
class SiteRuleSet:
    title_selectors: Tuple[str, ...]
    author_selectors: Tuple[str, ...]
    chapter_selectors: Tuple[str, ...]
    content_selectors: Tuple[str, ...]


DEFAULT_RULES = SiteRuleSet(
    title_selectors=(
        'h1',
        '.title',
        '.novel-title',
        '.story-title',
        'meta[property="og:title"]',
        'title',
    ),
    author_selectors=(
        '.author',
        '.novel-author',
        '.story-author',
        'meta[property="article:author"]',
        'a[href*="author"]',
    ),
    chapter_selectors=(
        '.chapter-list a',
        '.chapters a',
        'a[href*="chapter"]',
        '.chapter-link',
        '.novel-chapter a',
        '.story-chapter a',
    ),
    content_selectors=(
        '.chapter-content',
        '.entry-content',
        'article',
        '.post-content',
        '.content',
    ),
)

SITE_RULES: Dict[str, SiteRuleSet] = {
    'wuxiaworld.com': SiteRuleSet(
        title_selectors=('.novel-title',),
        author_selectors=('.author',),
        chapter_selectors=('.chapter-item a', '.wp-manga-chapter a'),
        content_selectors=('.chapter-content',),
    ),
    'royalroad.com': SiteRuleSet(
        title_selectors=('.fic-title h1',),
        author_selectors=('.author-name',),
        chapter_selectors=('.chapter-row a',),
        content_selectors=('.chapter-content',),
    ),
    'novelupdates.com': SiteRuleSet(
        title_selectors=('.seriestitlenu',),
        author_selectors=('#showauthors',),
        chapter_selectors=('#chapterlist a',),
        content_selectors=('.chapter-content',),
    ),
}


def normalize_hostname(hostname: str) -> str:
    hostname = (hostname or '').lower()
    if hostname.startswith('www.'):
        hostname = hostname[len('www.'):]
    return hostname


def rules_for(hostname: str) -> SiteRuleSet:
    return SITE_RULES.get(normalize_hostname(hostname), DEFAULT_RULES)


def rules_for_url(url: str) -> SiteRuleSet:
    return rules_for(urlparse(url).hostname or '')
