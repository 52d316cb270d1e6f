class ScraperError(Exception):
    """Base exception for conversion errors."""
    pass


class ValidationError(ScraperError):
    """Invalid user input such as a malformed URL or config value."""
    pass


class FetchFailure(ScraperError):
    """A page could not be retrieved from the source or any gateway."""

    def __init__(self, url: str, reason: str = ''):
        self.url = url
        self.reason = reason
        message = f"Failed to fetch {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class NoChaptersFound(ScraperError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"No chapters found on the page {url}")


class ExtractionError(ScraperError):
    """Chapter body could not be extracted from a fetched page."""
    pass


class ContentNotFound(ExtractionError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Could not find chapter content at {url}")


class ContentTooShort(ExtractionError):
    def __init__(self, url: str, length: int, minimum: int):
        self.url = url
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Extracted content is too short or empty ({length} < {minimum} characters) at {url}"
        )


class AssemblyError(ScraperError):
    pass


class NothingToPackage(AssemblyError):
    def __init__(self):
        super().__init__("No completed chapters selected for packaging")


class CoverEmbedFailure(ScraperError):
    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Cover image {url} could not be embedded: {reason}")


class ConversionCancelled(ScraperError):
    pass
