"""Configuration models with Pydantic validation."""

from backlog_utils.domain.config.app import AppConfig
from backlog_utils.domain.config.backlog import BacklogConfig
from backlog_utils.domain.config.retry import RetryConfig

__all__ = [
    "AppConfig",
    "BacklogConfig",
    "RetryConfig",
]
