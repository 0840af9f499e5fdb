"""Backlog connection configuration model."""

from typing import Optional

from pydantic import BaseModel


class BacklogConfig(BaseModel):
    """Configuration for the Backlog space.

    Attributes:
        url: Space base URL, e.g. https://example.backlog.com (None = from BACKLOG_URL env)
        api_key: Backlog API key (None = from BACKLOG_API_KEY env)
    """

    url: Optional[str] = None
    api_key: Optional[str] = None
