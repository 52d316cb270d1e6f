from bs4 import BeautifulSoup

from webtoepub.normalizer import normalize_fragment, text_length

BASE_URL = "https://example.com/novel/chapter-1"


def test_removes_denied_tags_and_junk_classes():
    soup = BeautifulSoup(
        '<div id="c"><script>track()</script><style>p{}</style><p>Hello world</p>'
        '<div class="ads">Buy now</div><button>Next</button>'
        '<div class="social-share">Share</div><div id="comments-box">Nice!</div>'
        '<div class="chapter-nav"><a href="/2">Next chapter</a></div></div>',
        'html.parser'
    )

    assert normalize_fragment(soup.div, BASE_URL) == '<p>Hello world</p>'


def test_input_element_is_left_untouched():
    soup = BeautifulSoup('<div><script>x()</script><p>Text</p></div>', 'html.parser')

    normalize_fragment(soup.div, BASE_URL)

    assert soup.div.script is not None


def test_removes_comments():
    result = normalize_fragment('<p>Visible<!-- hidden note --></p>', BASE_URL)

    assert result == '<p>Visible</p>'


def test_collapses_whitespace_and_keeps_word_boundaries():
    result = normalize_fragment('<div>  Some \n\n  <b>bold</b>   text </div>', BASE_URL)

    assert result == '<p>Some <b>bold</b> text</p>'


def test_text_only_div_becomes_paragraph():
    result = normalize_fragment('<div class="line">One line</div><div><p>Kept</p></div>', BASE_URL)

    assert result == '<p>One line</p><div><p>Kept</p></div>'


def test_line_breaks_split_paragraphs():
    result = normalize_fragment('<div>Line one<br>Line two<br/><br/>Line three</div>', BASE_URL)

    assert result == '<p>Line one</p><p>Line two</p><p>Line three</p>'


def test_top_level_text_is_wrapped():
    result = normalize_fragment('Loose text<p>Para</p>more <i>text</i>', BASE_URL)

    assert result == '<p>Loose text</p><p>Para</p><p>more <i>text</i></p>'


def test_empty_elements_are_removed_but_images_kept():
    result = normalize_fragment(
        '<p>Text</p><p>   </p><span></span><div><img src="pic.png"></div>', BASE_URL
    )

    assert result == '<p>Text</p><div><img src="https://example.com/novel/pic.png"/></div>'


def test_unresolvable_images_are_dropped():
    result = normalize_fragment(
        '<p>Text</p><p><img src="javascript:alert(1)"></p><p><img></p>', BASE_URL
    )

    assert result == '<p>Text</p>'


def test_absolute_image_sources_are_kept():
    result = normalize_fragment('<p>See <img src="https://cdn.example.org/a.jpg"> here</p>', BASE_URL)

    assert 'src="https://cdn.example.org/a.jpg"' in result


def test_normalizing_twice_is_a_no_op():
    messy = (
        '<!-- c --><div class="chapter"><div>First   paragraph with <em>emphasis</em> and&nbsp;space.</div>'
        '<div><p>Inner <a href="/x">link</a></p><span> </span></div>'
        'Trailing words<br>after break<img src="/i.png"></div>'
        '<p><b>x </b>\n</p><div class="adsbox">ad</div>Tail & <q>quote</q>'
    )

    once = normalize_fragment(messy, BASE_URL)
    twice = normalize_fragment(once, BASE_URL)

    assert twice == once
    assert 'Trailing words after break' in once
    assert 'src="https://example.com/i.png"' in once


def test_clean_fragment_passes_through_unchanged():
    clean = '<p>First paragraph.</p><p>Second <em>paragraph</em>.</p>'

    assert normalize_fragment(clean, BASE_URL) == clean


def test_text_length_counts_trimmed_text():
    assert text_length('<p>  abc </p><p>de</p>') == len('abc de')
    assert text_length('') == 0


def test_inline_wrapper_around_block_is_unwrapped():
    result = normalize_fragment('<span>a<div>b</div>c</span>', BASE_URL)

    assert result == '<p>a</p><p>b</p><p>c</p>'


def test_paragraph_holding_block_does_not_nest_paragraphs():
    result = normalize_fragment('<p>Intro<div>Nested</div></p>', BASE_URL)

    assert result == '<p>Intro</p><p>Nested</p>'
    assert normalize_fragment(result, BASE_URL) == result
