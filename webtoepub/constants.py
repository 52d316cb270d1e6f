from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .errors import ValidationError


@dataclass
class ScraperConstants:
    DEFAULT_TIMEOUT: int = 30
    MAX_RETRIES: int = 3
    MIN_CONTENT_LENGTH: int = 100
    TEXT_DENSITY_THRESHOLD: float = 0.5
    RETRY_DELAY: float = 2.0
    CHAPTER_DELAY: float = 1.0
    DEFAULT_REQUESTS_PER_SECOND: float = 2.0
    MAX_COVER_HEIGHT: int = 2400
    COVER_ASPECT_RATIO: float = 2/3
    DEFAULT_TITLE: str = 'Untitled Story'
    DEFAULT_LANGUAGE: str = 'en'
    PUBLISHER: str = 'WebToEpub'
    USER_AGENT: str = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36'


@dataclass
class Config:
    """Per-conversion settings, defaulting to ScraperConstants."""
    min_content_length: int = ScraperConstants.MIN_CONTENT_LENGTH
    density_threshold: float = ScraperConstants.TEXT_DENSITY_THRESHOLD
    max_retries: int = ScraperConstants.MAX_RETRIES
    retry_delay: float = ScraperConstants.RETRY_DELAY
    chapter_delay: float = ScraperConstants.CHAPTER_DELAY
    timeout: int = ScraperConstants.DEFAULT_TIMEOUT
    requests_per_second: float = ScraperConstants.DEFAULT_REQUESTS_PER_SECOND
    gateways: List[str] = field(default_factory=list)
    process_cover: bool = True
    modified: Optional[datetime] = None

    def validate(self) -> None:
        """Validate configuration settings."""
        if self.min_content_length < 0:
            raise ValidationError("Minimum content length cannot be negative")
        if not 0 <= self.density_threshold < 1:
            raise ValidationError("Density threshold must be between 0 and 1")
        if self.max_retries < 1:
            raise ValidationError("At least one attempt per chapter is required")
        if self.retry_delay < 0 or self.chapter_delay < 0:
            raise ValidationError("Delays cannot be negative")
        if self.requests_per_second <= 0:
            raise ValidationError("Request rate must be positive")
        for gateway in self.gateways:
            if '{url}' not in gateway:
                raise ValidationError(f"Gateway template must contain '{{url}}': {gateway}")
