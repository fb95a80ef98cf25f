"""
Retry policy value object.
"""

from typing import Optional

from pydantic import BaseModel, Field

BACKOFF_MULTIPLIER = 2.0


class RetryPolicy(BaseModel):
    """Bounded retry with doubling delay between attempts."""
    max_attempts: int = Field(default=3, ge=1, description="Total attempts including the first")
    initial_delay: float = Field(default=2.0, ge=0, description="Seconds before the second attempt")
    max_delay: Optional[float] = Field(default=None, gt=0, description="Optional cap on any single delay")

    class Config:
        frozen = True

    @property
    def multiplier(self) -> float:
        return BACKOFF_MULTIPLIER

    def delays(self):
        """Yield the wait before each retry (one fewer than max_attempts)."""
        delay = self.initial_delay
        for _ in range(self.max_attempts - 1):
            yield min(delay, self.max_delay) if self.max_delay is not None else delay
            delay *= self.multiplier
