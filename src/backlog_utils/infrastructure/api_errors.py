"""Helpers for reading Backlog API error bodies"""

from __future__ import annotations

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from backlog_utils.domain.models.error_response import ErrorResponse

logger = logging.getLogger(__name__)


def extract_error_message(response: Optional[requests.Response]) -> str:
    """Summarize the structured error body of a response.

    Reads the whole body, so the response cannot be read again afterwards.

    Args:
        response: Response believed to carry ``{"errors": [...]}`` (may be None)

    Returns:
        Error messages joined with ``"; "`` in original order, or an empty
        string when the body is unreadable, malformed or lists no errors
    """
    if response is None:
        return ""

    try:
        body = response.content
    except (requests.RequestException, OSError, RuntimeError) as e:
        logger.debug(f"Failed to read error body: {e}")
        return ""

    try:
        parsed = ErrorResponse.model_validate_json(body)
    except ValidationError as e:
        logger.debug(f"Error body is not a Backlog error response: {e}")
        return ""

    return "; ".join(parsed.messages)
