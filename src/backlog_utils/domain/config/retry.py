"""Retry configuration model."""

from pydantic import BaseModel, Field


class RetryConfig(BaseModel):
    """Configuration for rate-limit retries.
    
    Attributes:
        max_attempts: Maximum number of retries after a 429 response (0 = never retry)
        max_jitter_ms: Exclusive upper bound of the random delay added to each wait
        timeout: Per-request timeout in seconds
    """

    max_attempts: int = Field(5, ge=0, le=100)
    max_jitter_ms: int = Field(3000, gt=0)
    timeout: float = Field(30.0, gt=0.0)
