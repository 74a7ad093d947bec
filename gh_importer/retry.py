# gh_importer/retry.py
# Rate-limit-aware retry around single GitHub API calls.
# run() reports the outcome as a tagged result (Fetched / RetriesExhausted);
# execute() re-raises the triggering error when retries run out.
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import math
import time

from gh_importer.errors import RetryableError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5


@dataclass(frozen=True)
class Fetched:
    value: object


@dataclass(frozen=True)
class RetriesExhausted:
    error: RetryableError
    attempts: int


def _utcnow():
    return datetime.now(timezone.utc)


class RateLimitedFetcher:
    """Runs zero-argument API calls, backing off on rate-limit failures."""

    def __init__(self, client, max_retries=DEFAULT_MAX_RETRIES, sleep=time.sleep, clock=_utcnow):
        """
        client: anything with get_rate_limit_status(); consulted for the reset
        time when the failure itself carries no hint.
        max_retries: retries after the first attempt before giving up.
        sleep / clock: injectable for tests.
        """
        self.client = client
        self.max_retries = max_retries
        self.sleep = sleep
        self.clock = clock

    def execute(self, action):
        result = self.run(action)
        if isinstance(result, RetriesExhausted):
            raise result.error
        return result.value

    def run(self, action):
        attempt = 0
        while True:
            try:
                return Fetched(action())
            except RetryableError as exc:
                error = exc

            attempt += 1
            if attempt > self.max_retries:
                logger.error("Giving up after %d attempts: %s", attempt, error)
                return RetriesExhausted(error=error, attempts=attempt)

            wait = self.compute_wait(error, attempt)
            logger.warning(
                "Rate limit/abuse detected; sleeping %ss (try %d/%d)",
                wait, attempt, self.max_retries,
            )
            self.sleep(wait)

    def compute_wait(self, error, attempt):
        # Retry-After: 0 is a valid hint
        if error.retry_after is not None:
            return int(error.retry_after)

        resets_at = error.resets_at
        if resets_at is None:
            resets_at = self._reported_reset()
        if resets_at is not None:
            seconds = (resets_at - self.clock()).total_seconds()
            return max(math.ceil(seconds), 1)

        return 2 ** attempt

    def _reported_reset(self):
        if self.client is None:
            return None
        try:
            return self.client.get_rate_limit_status().resets_at
        except RetryableError as exc:
            # /rate_limit itself throttled; fall back to exponential backoff
            logger.warning("Rate limit status unavailable: %s", exc)
            return None
