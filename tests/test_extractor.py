import pytest
from bs4 import BeautifulSoup

from webtoepub.constants import Config
from webtoepub.errors import ContentNotFound, ContentTooShort
from webtoepub.extractor import (
    apply_extraction,
    extract_chapter,
    find_largest_text_block,
    text_density,
)
from webtoepub.models import Chapter, ChapterStatus
from webtoepub.rules import DEFAULT_RULES, SITE_RULES

CHAPTER_URL = "https://example.com/novel/chapter-3"

DENSE_TEXT = ('word ' * 100).strip()
DENSE_BLOCK = f'<div id="dense">{DENSE_TEXT}{"<span></span>" * 23}</div>'
SPARSE_BLOCK = '<div id="sparse">' + ' '.join(['<a href="/x">chapter</a>'] * 100) + '</div>'


def _soup(body: str) -> BeautifulSoup:
    return BeautifulSoup(f'<html><head><title>t</title></head><body>{body}</body></html>', 'html.parser')


def _chapter() -> Chapter:
    return Chapter(index=0, title="Chapter 3", url=CHAPTER_URL, base_url="https://example.com/novel/")


def test_site_content_selector_wins():
    soup = _soup(
        '<article>' + 'Decoy article text. ' * 20 + '</article>'
        '<div class="chapter-content"><p>' + 'Real chapter text. ' * 10 + '</p></div>'
    )

    content = extract_chapter(soup, _chapter(), SITE_RULES['royalroad.com'])

    assert 'Real chapter text.' in content
    assert 'Decoy' not in content


def test_default_selector_chain_used_when_site_selector_misses():
    soup = _soup('<div class="entry-content"><p>' + 'Entry text here. ' * 10 + '</p></div>')
    rules = SITE_RULES['novelupdates.com']

    content = extract_chapter(soup, _chapter(), rules)

    assert content.startswith('<p>Entry text here.')


def test_density_fixture_values():
    soup = _soup(DENSE_BLOCK + SPARSE_BLOCK)

    assert 0.6 < text_density(soup.find(id='dense')) < 0.65
    assert text_density(soup.find(id='sparse')) < 0.5
    assert len(soup.find(id='sparse').get_text()) > len(soup.find(id='dense').get_text())


def test_largest_block_prefers_dense_candidate_over_longer_sparse_one():
    soup = _soup(DENSE_BLOCK + SPARSE_BLOCK)

    assert find_largest_text_block(soup) is soup.find(id='dense')

    content = extract_chapter(soup, _chapter(), DEFAULT_RULES)
    assert DENSE_TEXT in content
    assert 'chapter' not in content


def test_density_threshold_is_configurable():
    soup = _soup(DENSE_BLOCK + SPARSE_BLOCK)

    assert find_largest_text_block(soup, threshold=0.3) is soup.find(id='sparse')


def test_largest_block_skips_page_chrome():
    soup = _soup(
        '<div class="sidebar-widget">' + 'Sidebar text goes on. ' * 30 + '</div>'
        '<div id="story">' + 'Story text. ' * 15 + '</div>'
        '<section id="footer">' + 'Footer text goes on. ' * 30 + '</section>'
    )

    assert find_largest_text_block(soup) is soup.find(id='story')


def test_largest_block_ties_go_to_first_in_document():
    soup = _soup('<div id="first">' + 'a' * 200 + '</div><div id="second">' + 'b' * 200 + '</div>')

    assert find_largest_text_block(soup) is soup.find(id='first')


def test_content_not_found_when_no_strategy_matches():
    soup = _soup('<p>Nothing but a paragraph.</p>')

    with pytest.raises(ContentNotFound):
        extract_chapter(soup, _chapter(), DEFAULT_RULES)


def test_exactly_minimum_length_passes():
    soup = _soup('<div class="chapter-content"><p>' + 'a' * 100 + '</p></div>')

    content = extract_chapter(soup, _chapter(), DEFAULT_RULES)

    assert content == '<p>' + 'a' * 100 + '</p>'


def test_one_below_minimum_length_fails():
    soup = _soup('<div class="chapter-content"><p>' + 'a' * 99 + '</p></div>')

    with pytest.raises(ContentTooShort) as excinfo:
        extract_chapter(soup, _chapter(), DEFAULT_RULES)

    assert excinfo.value.length == 99
    assert excinfo.value.minimum == 100


def test_minimum_length_is_configurable():
    soup = _soup('<div class="chapter-content"><p>Short but fine.</p></div>')

    content = extract_chapter(soup, _chapter(), DEFAULT_RULES, Config(min_content_length=10))

    assert content == '<p>Short but fine.</p>'


def test_images_resolved_against_chapter_url():
    soup = _soup(
        '<div class="chapter-content"><p>' + 'Text. ' * 30 + '</p><div><img src="img/map.png"></div></div>'
    )

    content = extract_chapter(soup, _chapter(), DEFAULT_RULES)

    assert 'src="https://example.com/novel/img/map.png"' in content


def test_apply_extraction_marks_chapter_completed():
    chapter = _chapter()
    soup = _soup('<div class="chapter-content"><p>' + 'Body text. ' * 20 + '</p></div>')

    content = apply_extraction(chapter, soup, DEFAULT_RULES)

    assert chapter.status == ChapterStatus.COMPLETED
    assert chapter.content == content
    assert chapter.error is None
