"""Conversion pipeline: start page -> chapter list -> chapter bodies -> EPUB."""
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .assembler import EpubAssembler, output_filename
from .constants import Config
from .discovery import discover_chapters, extract_metadata
from .errors import ConversionCancelled, ExtractionError, FetchFailure, ValidationError
from .extractor import apply_extraction
from .fetcher import FetchFunc, RetryPolicy
from .models import BookMetadata, Chapter, ChapterStatus, MetadataOverride
from .progress import ProgressReporter, ProgressSink
from .rules import rules_for_url
from .utils import parse_html, validate_url

logger = logging.getLogger(__name__)

# Share of the overall progress given to fetching chapters; packaging gets the rest
PACKAGING_START = 90.0


@dataclass
class ConversionResult:
    epub: bytes
    filename: str
    metadata: BookMetadata
    chapters: List[Chapter] = field(default_factory=list)

    @property
    def failures(self) -> int:
        return sum(1 for chapter in self.chapters
                   if chapter.selected and chapter.status == ChapterStatus.ERROR)

    @property
    def packaged(self) -> int:
        return sum(1 for chapter in self.chapters if chapter.is_packageable)


class ConversionSession:
    """Owns the metadata and chapter list of one conversion.

    ``fetch`` is any callable returning the raw bytes of a URL and raising
    FetchFailure when it cannot. Chapters are processed one at a time in
    list order.
    """

    def __init__(self, fetch: FetchFunc, progress: Optional[ProgressSink] = None,
                 config: Optional[Config] = None, sleep: Callable[[float], None] = time.sleep):
        self.fetch = fetch
        self.config = config or Config()
        self.config.validate()
        self.progress = ProgressReporter(progress)
        self.retry_policy = RetryPolicy.from_config(self.config, sleep=sleep)
        self._sleep = sleep
        self._cancelled = threading.Event()
        self.start_url: Optional[str] = None
        self.metadata = BookMetadata()
        self.chapters: List[Chapter] = []

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def analyse(self, start_url: str) -> List[Chapter]:
        """Fetch the start page and populate metadata and the chapter list."""
        start_url = (start_url or '').strip()
        if not validate_url(start_url):
            raise ValidationError(f"Invalid URL: {start_url!r}")
        self.start_url = start_url

        self.progress.report(0, 'Fetching page content...')
        soup = parse_html(self.fetch(start_url))
        rules = rules_for_url(start_url)

        self.progress.report(0, 'Extracting metadata...')
        self.metadata = extract_metadata(soup, start_url, rules)

        self.progress.report(0, 'Finding chapters...')
        self.chapters = discover_chapters(soup, start_url, rules)
        logger.info(f"Found {len(self.chapters)} chapters for '{self.metadata.title}'")
        return self.chapters

    def select_range(self, first: int, last: int) -> None:
        """Keep only chapters at 1-based positions ``first``..``last``."""
        for position, chapter in enumerate(self.chapters, 1):
            chapter.selected = first <= position <= last

    def _fetch_and_extract(self, chapter: Chapter) -> str:
        chapter.mark_loading()
        soup = parse_html(self.fetch(chapter.url))
        return apply_extraction(chapter, soup, rules_for_url(chapter.url), self.config)

    def fetch_chapter(self, chapter: Chapter) -> bool:
        """Fetch and extract one chapter, retrying per policy. Returns success."""
        try:
            self.retry_policy.call(self._fetch_and_extract, chapter)
        except (FetchFailure, ExtractionError) as e:
            chapter.mark_error(str(e))
            logger.error(f"Chapter '{chapter.title}' failed after {chapter.attempts} attempts: {str(e)}")
            return False
        return True

    def fetch_chapters(self) -> int:
        """Process every selected chapter; returns the number of failures."""
        pending = [chapter for chapter in self.chapters if chapter.selected]
        total = len(pending)
        progress = self.progress.span(0, PACKAGING_START)
        failures = 0
        for settled, chapter in enumerate(pending):
            if self.cancelled:
                logger.info("Conversion cancelled, stopping before next chapter")
                break
            if settled:
                self._sleep(self.config.chapter_delay)
            progress.report(settled / total * 100, f"Fetching chapter {settled + 1}/{total}")
            if not self.fetch_chapter(chapter):
                failures += 1
            completed = settled + 1 - failures
            progress.report(
                (settled + 1) / total * 100,
                f"Processed {completed}/{total} chapters ({failures} errors)"
            )
        return failures

    def package(self, override: Optional[MetadataOverride] = None) -> ConversionResult:
        metadata = override.apply(self.metadata) if override is not None else self.metadata
        assembler = EpubAssembler(fetch=self.fetch, config=self.config,
                                  progress=self.progress.span(PACKAGING_START, 100))
        content = assembler.assemble(metadata, self.chapters)
        return ConversionResult(
            epub=content,
            filename=output_filename(metadata, override),
            metadata=metadata,
            chapters=self.chapters,
        )

    def convert(self, start_url: str, override: Optional[MetadataOverride] = None) -> ConversionResult:
        self.analyse(start_url)
        self.fetch_chapters()
        if self.cancelled:
            raise ConversionCancelled("Conversion cancelled before packaging")
        result = self.package(override)
        logger.info(f"Packaged {result.packaged} chapters, {result.failures} failed")
        return result
