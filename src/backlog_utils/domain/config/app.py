"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from backlog_utils.domain.config.backlog import BacklogConfig
from backlog_utils.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        backlog: Backlog space connection configuration
        retry: Rate-limit retry configuration
    """

    backlog: BacklogConfig = Field(default_factory=BacklogConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        validate_assignment=True,  # Validate on attribute assignment
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "backlog": {
                    "url": "https://example.backlog.com",
                    "api_key": None,
                },
                "retry": {
                    "max_attempts": 5,
                    "max_jitter_ms": 3000,
                    "timeout": 30.0,
                },
            }
        },
    )
