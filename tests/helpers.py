from typing import Dict, Iterable, List, Optional, Tuple, Union

from webtoepub.errors import FetchFailure

START_URL = 'https://novels.example.com/story/'


class FakeFetcher:
    """In-memory stand-in for HttpFetcher.

    ``failures`` maps a URL to the number of times it should fail before the
    page is served.
    """

    def __init__(self, pages: Dict[str, Union[str, bytes]], failures: Optional[Dict[str, int]] = None):
        self.pages = dict(pages)
        self.failures = dict(failures or {})
        self.calls: List[str] = []

    def __call__(self, url: str) -> bytes:
        self.calls.append(url)
        remaining = self.failures.get(url, 0)
        if remaining:
            self.failures[url] = remaining - 1
            raise FetchFailure(url, 'simulated outage')
        if url not in self.pages:
            raise FetchFailure(url, 'not found')
        page = self.pages[url]
        return page.encode('utf-8') if isinstance(page, str) else page


def start_page(links: Iterable[Tuple[str, str]], title: str = 'The Story', extra: str = '') -> str:
    items = ''.join(f'<li><a href="{href}">{text}</a></li>' for href, text in links)
    return (
        '<html><head><title>Story site</title></head><body>'
        f'<h1>{title}</h1>{extra}<ul class="chapter-list">{items}</ul>'
        '</body></html>'
    )


def chapter_page(title: str, paragraphs: int = 3) -> str:
    body = ''.join(
        f'<p>{title} paragraph {i}: ' + 'The story continues with plenty of words. ' * 3 + '</p>'
        for i in range(paragraphs)
    )
    return (
        f'<html><head><title>{title}</title></head><body>'
        '<div class="chapter-nav"><a href="#prev">Previous</a><a href="#next">Next</a></div>'
        f'<div class="chapter-content">{body}</div>'
        '</body></html>'
    )


class SleepRecorder:
    def __init__(self):
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
