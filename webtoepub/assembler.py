"""EPUB packaging of extracted chapters with EbookLib."""
import html
import logging
import uuid
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ebooklib import epub
from PIL import Image

from .constants import Config, ScraperConstants
from .errors import CoverEmbedFailure, FetchFailure, NothingToPackage
from .fetcher import FetchFunc
from .models import BookMetadata, Chapter, MetadataOverride
from .normalizer import normalize_fragment
from .progress import ProgressReporter, ProgressSpan
from .utils import sanitize_filename, validate_url

logger = logging.getLogger(__name__)

STYLE_FILE = 'style/main.css'
COVER_FILE = 'cover.jpg'

STYLE = """
body {
    font-family: Georgia, serif;
    line-height: 1.6;
    margin: 2em;
    text-align: justify;
}
h1, h2, h3 {
    color: #333;
    margin-top: 2em;
    margin-bottom: 1em;
}
h1 {
    font-size: 1.8em;
    text-align: center;
    border-bottom: 2px solid #333;
    padding-bottom: 0.5em;
}
h2 { font-size: 1.4em; }
p {
    margin-bottom: 1em;
    text-indent: 2em;
}
img {
    max-width: 100%;
    height: auto;
    display: block;
    margin: 1em auto;
}
blockquote {
    margin: 1em 0;
    padding: 0.5em 1em;
    border-left: 4px solid #ccc;
    background: #f9f9f9;
}
hr {
    border: none;
    border-top: 1px solid #ccc;
    margin: 2em 0;
}
"""


def prepare_cover(image_data: bytes, crop: bool = True) -> bytes:
    """Convert cover bytes to a JPEG, cropped to 2:3 and height-capped."""
    image = Image.open(BytesIO(image_data))
    if image.mode != 'RGB':
        image = image.convert('RGB')

    if crop:
        width, height = image.size
        target_ratio = ScraperConstants.COVER_ASPECT_RATIO
        current_ratio = width / height

        if current_ratio != target_ratio:
            if current_ratio > target_ratio:
                new_width = int(height * target_ratio)
                left = (width - new_width) // 2
                image = image.crop((left, 0, left + new_width, height))
            else:
                new_height = int(width / target_ratio)
                top = (height - new_height) // 2
                image = image.crop((0, top, width, top + new_height))

        if image.size[1] > ScraperConstants.MAX_COVER_HEIGHT:
            new_height = ScraperConstants.MAX_COVER_HEIGHT
            new_width = int(new_height * target_ratio)
            image = image.resize((new_width, new_height), Image.Resampling.LANCZOS)

    img_byte_arr = BytesIO()
    image.save(img_byte_arr, format='JPEG', quality=95)
    return img_byte_arr.getvalue()


def book_identifier(metadata: BookMetadata, chapters: Sequence[Chapter]) -> str:
    seed = '\n'.join([metadata.title] + [chapter.url for chapter in chapters])
    return f'urn:uuid:{uuid.uuid5(uuid.NAMESPACE_URL, seed)}'


def output_filename(metadata: BookMetadata, override: Optional[MetadataOverride] = None) -> str:
    if override is not None and override.filename.strip():
        filename = sanitize_filename(override.filename.strip())
    else:
        filename = sanitize_filename(metadata.title or 'untitled')
        if metadata.author:
            filename = f"{filename}_by_{sanitize_filename(metadata.author)}"
    filename = filename or 'untitled'
    return filename if filename.lower().endswith('.epub') else f"{filename}.epub"


class EpubAssembler:
    def __init__(self, fetch: Optional[FetchFunc] = None, config: Optional[Config] = None,
                 progress: Optional[Union[ProgressReporter, ProgressSpan]] = None):
        self.fetch = fetch
        self.config = config or Config()
        self.progress = progress or ProgressReporter()

    def assemble(self, metadata: BookMetadata, chapters: Sequence[Chapter]) -> bytes:
        """Build the EPUB for the selected, completed chapters and return its bytes."""
        included = [chapter for chapter in chapters if chapter.is_packageable]
        if not included:
            raise NothingToPackage()

        self.progress.report(0, 'Creating EPUB structure...')
        book = self._create_book(metadata, included)
        style = self._add_styling(book)

        items = []
        for position, chapter in enumerate(included, 1):
            self.progress.report(
                30 + (position - 1) / len(included) * 60,
                f"Processing chapter {position} of {len(included)}"
            )
            items.append(self._add_chapter(book, chapter, position, style, metadata.language))

        if metadata.cover_url:
            self.progress.report(90, 'Adding cover image...')
            try:
                self._add_cover(book, metadata.cover_url)
            except CoverEmbedFailure as e:
                logger.warning(str(e))

        self._finalize(book, items)

        self.progress.report(95, 'Generating final EPUB file...')
        output = BytesIO()
        epub.write_epub(output, book, self._write_options())
        self.progress.report(100, 'EPUB generation complete')
        return output.getvalue()

    def write(self, path: Union[str, Path], metadata: BookMetadata, chapters: Sequence[Chapter]) -> Path:
        path = Path(path)
        path.write_bytes(self.assemble(metadata, chapters))
        return path

    def _modified(self) -> datetime:
        return self.config.modified or datetime.now(timezone.utc)

    def _write_options(self) -> dict:
        return {
            'play_order': {'enabled': True, 'start_from': 1},
            'mtime': self._modified(),
        }

    def _create_book(self, metadata: BookMetadata, chapters: List[Chapter]) -> epub.EpubBook:
        book = epub.EpubBook()
        book.set_identifier(book_identifier(metadata, chapters))
        book.set_title(metadata.title or ScraperConstants.DEFAULT_TITLE)
        book.set_language(metadata.language or ScraperConstants.DEFAULT_LANGUAGE)

        if metadata.author:
            book.add_author(metadata.author)
        book.add_metadata('DC', 'publisher', metadata.publisher)
        book.add_metadata('DC', 'date', self._modified().strftime('%Y-%m-%dT%H:%M:%SZ'))
        if metadata.description:
            book.add_metadata('DC', 'description', metadata.description)
        if metadata.subject:
            book.add_metadata('DC', 'subject', metadata.subject)
        return book

    def _add_styling(self, book: epub.EpubBook) -> epub.EpubItem:
        style = epub.EpubItem(
            uid="style_main",
            file_name=STYLE_FILE,
            media_type="text/css",
            content=STYLE
        )
        book.add_item(style)
        return style

    def _add_chapter(self, book: epub.EpubBook, chapter: Chapter, position: int,
                     style: epub.EpubItem, language: str) -> epub.EpubHtml:
        item = epub.EpubHtml(
            uid=f'chapter-{position}',
            title=chapter.title,
            file_name=f'chapter-{position}.xhtml',
            lang=language or ScraperConstants.DEFAULT_LANGUAGE
        )
        body = normalize_fragment(chapter.content or '', chapter.url)
        item.content = '\n'.join([
            f'<h1>{html.escape(chapter.title)}</h1>',
            '<div class="chapter-content">',
            body,
            '</div>',
        ])
        item.add_item(style)
        book.add_item(item)
        return item

    def _add_cover(self, book: epub.EpubBook, cover_url: str) -> None:
        if not validate_url(cover_url):
            raise CoverEmbedFailure(cover_url, "invalid URL")
        if self.fetch is None:
            raise CoverEmbedFailure(cover_url, "no fetcher available")
        try:
            image_data = self.fetch(cover_url)
        except FetchFailure as e:
            raise CoverEmbedFailure(cover_url, str(e)) from e
        try:
            cover = prepare_cover(image_data, crop=self.config.process_cover)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise CoverEmbedFailure(cover_url, f"image processing failed: {str(e)}") from e
        book.set_cover(COVER_FILE, cover, create_page=False)

    def _finalize(self, book: epub.EpubBook, items: List[epub.EpubHtml]) -> None:
        book.toc = tuple(items)
        book.add_item(epub.EpubNcx())
        book.add_item(epub.EpubNav())
        book.spine = list(items)
