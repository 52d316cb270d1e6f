"""Turn a serialized web novel into a single EPUB file."""
from .assembler import EpubAssembler, output_filename
from .constants import Config, ScraperConstants
from .discovery import discover_chapters, extract_metadata
from .errors import (
    AssemblyError,
    ContentNotFound,
    ContentTooShort,
    ConversionCancelled,
    CoverEmbedFailure,
    ExtractionError,
    FetchFailure,
    NoChaptersFound,
    NothingToPackage,
    ScraperError,
    ValidationError,
)
from .extractor import extract_chapter, find_largest_text_block
from .fetcher import HttpFetcher, RateLimiter, RetryPolicy
from .models import BookMetadata, Chapter, ChapterStatus, MetadataOverride
from .normalizer import normalize_fragment
from .rules import DEFAULT_RULES, SiteRuleSet, rules_for
from .session import ConversionResult, ConversionSession

__version__ = '1.0.0'
