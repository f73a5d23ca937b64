"""
Detector adapter wrappers: plain callables, retry with backoff, rate limiting
"""

import functools
import logging
import time
from typing import Any, Callable, List, Tuple, Type

from ..core import Detection, Detector, DetectorFailure

logger = logging.getLogger(__name__)


def retry(max_attempts: int = 3,
          backoff: float = 0.5,
          max_backoff: float = 8.0,
          exceptions: Tuple[Type[BaseException], ...] = (Exception,),
          sleep: Callable[[float], None] = time.sleep):
    """
    Retry a call with exponential backoff

    The last exception is re-raised once attempts are exhausted.

    Args:
        max_attempts: Total number of calls, including the first
        backoff: Delay before the first retry in seconds
        max_backoff: Upper bound on the delay
        exceptions: Exception types that trigger a retry
        sleep: Sleep function
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be >= 1")

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = backoff
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        raise
                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt}/{max_attempts}): {e}; "
                        f"retrying in {delay:.2f}s"
                    )
                    sleep(delay)
                    delay = min(delay * 2, max_backoff)
        return wrapper

    return decorator


class CallableDetector(Detector):
    """Adapts a plain ``image -> detections`` function to the Detector interface"""

    def __init__(self, func: Callable[[Any], List[Detection]]):
        self.func = func

    def detect(self, image: Any) -> List[Detection]:
        return list(self.func(image))


class RetryingDetector(Detector):
    """Wraps a detector with retry, backoff and a minimum call interval"""

    def __init__(self,
                 detector: Detector,
                 max_attempts: int = 3,
                 backoff: float = 0.5,
                 max_backoff: float = 8.0,
                 min_interval: float = 0.0,
                 retry_on: Tuple[Type[BaseException], ...] = (Exception,),
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            detector: Underlying detector adapter
            max_attempts: Calls per frame before giving up
            backoff: Delay before the first retry in seconds
            max_backoff: Upper bound on the retry delay
            min_interval: Minimum seconds between consecutive calls
            retry_on: Exception types worth retrying
            clock: Monotonic clock
            sleep: Sleep function
        """
        self.detector = detector
        self.max_attempts = max_attempts
        self.min_interval = min_interval
        self.retry_on = retry_on
        self.clock = clock
        self.sleep = sleep
        self._last_call = None

        self._detect = retry(
            max_attempts=max_attempts,
            backoff=backoff,
            max_backoff=max_backoff,
            exceptions=retry_on,
            sleep=sleep
        )(self._throttled_detect)

    def detect(self, image: Any) -> List[Detection]:
        """
        Raises:
            DetectorFailure: every attempt failed
        """
        try:
            return self._detect(image)
        except DetectorFailure:
            raise
        except self.retry_on as e:
            raise DetectorFailure(
                f"Detector failed after {self.max_attempts} attempts: {e}"
            ) from e

    def _throttled_detect(self, image: Any) -> List[Detection]:
        if self.min_interval > 0 and self._last_call is not None:
            wait = self.min_interval - (self.clock() - self._last_call)
            if wait > 0:
                self.sleep(wait)
        self._last_call = self.clock()
        return self.detector.detect(image)
