"""HTML clean-up shared by chapter extraction and EPUB packaging.

``normalize_fragment`` turns the inner markup of a content element into a
flat sequence of paragraphs: junk elements are dropped, inline wrappers
around blocks are unwrapped, whitespace is collapsed, text-only ``div``
wrappers become ``p`` elements, stray text is wrapped in paragraphs, empty
elements are removed and image sources are made absolute.
Feeding the result back in returns it unchanged.
"""
import re
from typing import List, Optional, Union

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from bs4.element import CData, Declaration, Doctype, ProcessingInstruction

from .utils import resolve_url

REMOVED_TAGS = ('script', 'style', 'iframe', 'form', 'button', 'input')

# Matched as substrings of the class and id attributes
UNWANTED_MARKERS = (
    'advert', 'adsbox', 'adsbygoogle', 'google',
    'share', 'social',
    'comment',
    'chapter-nav', 'prev-chapter', 'next-chapter', 'chapter-buttons',
    'rating', 'author-note',
)
# Matched against whole class tokens or as their prefix
UNWANTED_TOKENS = ('ads', 'ad')
UNWANTED_PREFIXES = ('ad-', 'ads-')

BLOCK_TAGS = frozenset((
    'address', 'article', 'aside', 'blockquote', 'caption', 'center', 'dd',
    'details', 'dialog', 'div', 'dl', 'dt', 'fieldset', 'figcaption', 'figure',
    'footer', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'header', 'hr', 'li', 'main',
    'nav', 'ol', 'p', 'pre', 'section', 'summary', 'table', 'tbody', 'td',
    'tfoot', 'th', 'thead', 'tr', 'ul',
))

IMAGE_SCHEMES = ('http', 'https', 'data')

_WHITESPACE_RE = re.compile(r'\s+')
_NON_TEXT_NODES = (Comment, CData, Declaration, Doctype, ProcessingInstruction)


def normalize_fragment(fragment: Union[Tag, str], base_url: str) -> str:
    """Return the cleaned inner markup of ``fragment``.

    ``fragment`` is either a parsed element, whose children are cleaned, or
    a markup string. The input element is not modified.
    """
    if isinstance(fragment, Tag):
        markup = fragment.decode_contents()
    else:
        markup = fragment or ''
    root = BeautifulSoup(markup, 'html.parser')

    _remove_unwanted(root)
    _unwrap_misnested(root)
    _collapse_whitespace(root)
    _divs_to_paragraphs(root, base_url)
    _wrap_bare_text(root)
    _remove_empty(root)
    _resolve_images(root, base_url)
    # removals above can leave adjacent or edge whitespace behind
    _collapse_whitespace(root)

    return root.decode()


def text_length(markup: str) -> int:
    return len(BeautifulSoup(markup or '', 'html.parser').get_text().strip())


def _is_unwanted(tag: Tag) -> bool:
    if tag.name in REMOVED_TAGS:
        return True
    classes = tag.get('class') or []
    if isinstance(classes, str):
        classes = classes.split()
    tokens = [c.lower() for c in classes]
    element_id = tag.get('id')
    if isinstance(element_id, str) and element_id:
        tokens.append(element_id.lower())
    for token in tokens:
        if token in UNWANTED_TOKENS or token.startswith(UNWANTED_PREFIXES):
            return True
        if any(marker in token for marker in UNWANTED_MARKERS):
            return True
    return False


def _remove_unwanted(root: BeautifulSoup) -> None:
    for node in root.find_all(string=lambda s: isinstance(s, _NON_TEXT_NODES)):
        node.extract()
    for tag in root.find_all(True):
        if tag.decomposed:
            continue
        if _is_unwanted(tag):
            tag.decompose()
    root.smooth()


def _is_block(tag: Tag) -> bool:
    return tag.name in BLOCK_TAGS


def _unwrap_misnested(root: BeautifulSoup) -> None:
    """Unwrap inline elements and paragraphs that contain block elements."""
    for tag in root.find_all(True):
        if tag.name in BLOCK_TAGS and tag.name != 'p':
            continue
        if tag.find(_is_block) is not None:
            tag.unwrap()


def _is_boundary(node) -> bool:
    return node is None or (isinstance(node, Tag) and (node.name in BLOCK_TAGS or node.name == 'br'))


def _neighbour(node, forward: bool):
    """Nearest non-blank node beside ``node``, climbing out of inline parents."""
    while True:
        sibling = node.next_sibling if forward else node.previous_sibling
        while isinstance(sibling, NavigableString) and not sibling.strip():
            sibling = sibling.next_sibling if forward else sibling.previous_sibling
        if sibling is not None:
            return sibling
        parent = node.parent
        if parent is None or isinstance(parent, BeautifulSoup) or parent.name in BLOCK_TAGS:
            return None
        node = parent


def _collapse_whitespace(root: BeautifulSoup) -> None:
    root.smooth()
    for string in list(root.find_all(string=True)):
        text = _WHITESPACE_RE.sub(' ', str(string))
        if _is_boundary(_neighbour(string, forward=False)):
            text = text.lstrip()
        if _is_boundary(_neighbour(string, forward=True)):
            text = text.rstrip()
        if not text:
            string.extract()
        elif text != str(string):
            string.replace_with(NavigableString(text))


def _image_source(img: Tag, base_url: str) -> Optional[str]:
    resolved = resolve_url(img.get('src') or '', base_url)
    if resolved is None or resolved.split(':', 1)[0].lower() not in IMAGE_SCHEMES:
        return None
    return resolved


def _has_block_content(tag: Tag, base_url: str) -> bool:
    for child in tag.find_all(True):
        if child.name == 'img':
            if _image_source(child, base_url):
                return True
        elif child.name in BLOCK_TAGS and child.get_text(strip=True):
            return True
    return False


def _split_at_breaks(paragraph: Tag, root: BeautifulSoup) -> None:
    if paragraph.find('br', recursive=False) is None:
        return
    groups: List[list] = [[]]
    for child in list(paragraph.contents):
        if isinstance(child, Tag) and child.name == 'br':
            child.decompose()
            groups.append([])
        else:
            groups[-1].append(child.extract())
    for group in groups:
        new_paragraph = root.new_tag('p')
        for node in group:
            new_paragraph.append(node)
        paragraph.insert_before(new_paragraph)
    paragraph.decompose()


def _divs_to_paragraphs(root: BeautifulSoup, base_url: str) -> None:
    for div in root.find_all('div'):
        if not _has_block_content(div, base_url):
            div.name = 'p'
            div.attrs = {}
    for paragraph in root.find_all('p'):
        _split_at_breaks(paragraph, root)


def _has_text(nodes) -> bool:
    for node in nodes:
        text = node.get_text() if isinstance(node, Tag) else str(node)
        if text.strip():
            return True
    return False


def _wrap_bare_text(root: BeautifulSoup) -> None:
    runs: List[list] = [[]]
    for child in list(root.contents):
        if isinstance(child, Tag) and child.name == 'br':
            runs.append([])
        elif isinstance(child, Tag) and child.name in BLOCK_TAGS:
            runs.append([])
        else:
            runs[-1].append(child)
    for run in runs:
        if not run or not _has_text(run):
            continue
        paragraph = root.new_tag('p')
        run[0].insert_before(paragraph)
        for node in run:
            paragraph.append(node.extract())


def _remove_empty(root: BeautifulSoup) -> None:
    for tag in reversed(root.find_all(True)):
        if tag.decomposed or tag.name == 'img':
            continue
        if tag.get_text(strip=True) or tag.find('img') is not None:
            continue
        if tag.name == 'br':
            # keeps the words on either side apart
            tag.replace_with(' ')
        else:
            tag.decompose()


def _resolve_images(root: BeautifulSoup, base_url: str) -> None:
    for img in root.find_all('img'):
        source = _image_source(img, base_url)
        if source is not None:
            img['src'] = source
            continue
        parent = img.parent
        img.decompose()
        while (parent is not None and parent is not root
               and not parent.get_text(strip=True) and parent.find('img') is None):
            grandparent = parent.parent
            parent.decompose()
            parent = grandparent
