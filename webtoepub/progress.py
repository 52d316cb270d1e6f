import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ProgressSink = Callable[[float, str], None]


class ProgressReporter:
    """Wrap a progress sink so it only ever sees non-decreasing percentages.

    Errors raised by the sink are logged and otherwise ignored; reporting
    must never interrupt a conversion.
    """

    def __init__(self, sink: Optional[ProgressSink] = None):
        self.sink = sink
        self.percentage = 0.0

    def report(self, percentage: float, message: str) -> None:
        percentage = min(100.0, max(self.percentage, float(percentage)))
        self.percentage = percentage
        logger.debug(f"Progress: {message} {round(percentage)}%")
        if self.sink is None:
            return
        try:
            self.sink(percentage, message)
        except Exception as e:
            logger.warning(f"Progress callback failed: {str(e)}")

    def span(self, start: float, end: float) -> 'ProgressSpan':
        return ProgressSpan(self, start, end)

    __call__ = report


class ProgressTracker:
    """Console progress bar used as a progress sink by the CLI."""

    def __init__(self, bar_length: int = 50):
        self.bar_length = bar_length

    def __call__(self, percentage: float, message: str) -> None:
        filled_length = int(self.bar_length * percentage // 100)
        bar = '=' * filled_length + '-' * (self.bar_length - filled_length)
        print(f'\rProgress |{bar}| {percentage:.1f}% {message:<40}', end='', flush=True)


class ProgressSpan:
    """Map a stage's own 0-100 scale onto ``start``..``end`` of a parent reporter."""

    def __init__(self, parent: ProgressReporter, start: float, end: float):
        self.parent = parent
        self.start = start
        self.end = end

    def report(self, percentage: float, message: str) -> None:
        percentage = min(100.0, max(0.0, float(percentage)))
        self.parent.report(self.start + (self.end - self.start) * percentage / 100, message)

    __call__ = report
