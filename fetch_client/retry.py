import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .models import Response
from .types import AttemptFn

if TYPE_CHECKING:
    from .config import ClientConfig

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STATUS_CODES = frozenset({500, 503})


@dataclass(frozen=True)
class RetryPolicy:
    """Re-run a single-attempt executor while it returns a retryable status.

    The delay between attempts is constant. Running out of attempts is not an
    error: the last response is returned as-is. Transport errors propagate on
    the first occurrence.
    """

    max_retries: int = 0
    retry_delay: int = 1000  # milliseconds
    retry_status_codes: frozenset[int] = DEFAULT_RETRY_STATUS_CODES
    sleep: Callable[[float], None] = field(default=time.sleep, compare=False, repr=False)

    @classmethod
    def from_config(cls, config: "ClientConfig", sleep: Callable[[float], None] | None = None) -> "RetryPolicy":
        return cls(
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            retry_status_codes=frozenset(config.retry_status_codes),
            sleep=sleep or time.sleep,
        )

    def should_retry(self, response: Response, attempts: int) -> bool:
        if self.max_retries <= 0:
            return False
        return response.status_code in self.retry_status_codes and attempts < self.max_retries

    def execute(self, attempt: AttemptFn) -> Response:
        attempts = 1
        response = attempt()
        while self.should_retry(response, attempts):
            logger.warning(
                "Retrying after status %s (attempt %d/%d, delay %dms)",
                response.status_code,
                attempts,
                self.max_retries,
                self.retry_delay,
            )
            self.sleep(self.retry_delay / 1000)
            attempts += 1
            response = attempt()
        return replace(response, attempts=attempts)
