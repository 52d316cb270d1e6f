import logging
import time
from collections import deque
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple, Type
from urllib.parse import quote

import requests

from .constants import Config, ScraperConstants
from .errors import ExtractionError, FetchFailure

logger = logging.getLogger(__name__)

FetchFunc = Callable[[str], bytes]


class RateLimiter:
    """Rate limiting implementation with exponential backoff."""

    def __init__(self, requests_per_second: float = ScraperConstants.DEFAULT_REQUESTS_PER_SECOND,
                 sleep: Callable[[float], None] = time.sleep):
        self.min_interval = 1.0 / requests_per_second
        self.last_request_times = deque(maxlen=10)
        self.failed_attempts = 0
        self._sleep = sleep

    def wait(self) -> None:
        """Wait appropriate time between requests with exponential backoff."""
        now = datetime.now()

        if self.last_request_times:
            elapsed = (now - self.last_request_times[-1]).total_seconds()
            wait_time = max(0, self.min_interval - elapsed)
        else:
            wait_time = 0

        if self.failed_attempts > 0:
            wait_time += min(300, (2 ** self.failed_attempts) - 1)

        if wait_time > 0:
            self._sleep(wait_time)

        self.last_request_times.append(datetime.now())

    def record_failure(self) -> None:
        self.failed_attempts += 1

    def record_success(self) -> None:
        self.failed_attempts = 0


class RetryPolicy:
    """Re-run a fetch-and-extract step with a growing pause between attempts.

    The n-th retry waits ``delay * n`` seconds. When every attempt fails the
    last error is raised to the caller.
    """

    RETRYABLE: Tuple[Type[Exception], ...] = (FetchFailure, ExtractionError)

    def __init__(self, max_attempts: int = ScraperConstants.MAX_RETRIES,
                 delay: float = ScraperConstants.RETRY_DELAY,
                 sleep: Callable[[float], None] = time.sleep):
        self.max_attempts = max_attempts
        self.delay = delay
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: Config, sleep: Callable[[float], None] = time.sleep) -> 'RetryPolicy':
        return cls(max_attempts=config.max_retries, delay=config.retry_delay, sleep=sleep)

    def call(self, func: Callable, *args, on_retry: Optional[Callable[[int, Exception], None]] = None):
        for attempt in range(1, self.max_attempts + 1):
            try:
                return func(*args)
            except self.RETRYABLE as e:
                if attempt >= self.max_attempts:
                    raise
                logger.warning(f"Attempt {attempt} failed: {str(e)}")
                if on_retry is not None:
                    on_retry(attempt, e)
                self._sleep(self.delay * attempt)


class HttpFetcher:
    """Fetch pages with requests, falling back to proxy gateways.

    Gateways are URL templates such as ``https://corsproxy.io/?{url}``; the
    target URL is percent-encoded into the ``{url}`` slot. They are tried in
    order after the direct request fails.
    """

    def __init__(self, config: Optional[Config] = None, session: Optional[requests.Session] = None,
                 rate_limiter: Optional[RateLimiter] = None):
        self.config = config or Config()
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': ScraperConstants.USER_AGENT})
        self.rate_limiter = rate_limiter or RateLimiter(self.config.requests_per_second)

    def candidate_urls(self, url: str) -> List[str]:
        return [url] + [gateway.replace('{url}', quote(url, safe='')) for gateway in self.config.gateways]

    def _get(self, url: str) -> bytes:
        self.rate_limiter.wait()
        response = self.session.get(url, timeout=self.config.timeout)
        response.raise_for_status()
        if not response.content.strip():
            raise ValueError("Empty response received")
        return response.content

    def fetch(self, url: str) -> bytes:
        last_error = None
        for candidate in self.candidate_urls(url):
            try:
                content = self._get(candidate)
            except (requests.RequestException, ValueError) as e:
                logger.debug(f"Request to {candidate} failed: {str(e)}")
                last_error = e
                continue
            self.rate_limiter.record_success()
            logger.debug(f"Successfully fetched {url} with length: {len(content)}")
            return content

        self.rate_limiter.record_failure()
        raise FetchFailure(url, str(last_error) if last_error else 'no gateway succeeded')

    __call__ = fetch


def iter_gateways(values: Iterable[str]) -> List[str]:
    return [value.strip() for value in values if value and value.strip()]
