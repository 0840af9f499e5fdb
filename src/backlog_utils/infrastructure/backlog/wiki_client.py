"""Backlog wiki API client"""

import logging
import re
from typing import List, Optional, Sequence

import requests
from pydantic import ValidationError

from backlog_utils.domain.models.wiki_page import WikiPage
from backlog_utils.domain.text_replace import replace_pairs, to_pairs
from backlog_utils.infrastructure.api_errors import extract_error_message
from backlog_utils.infrastructure.errors import BacklogAPIError, BacklogError
from backlog_utils.infrastructure.http_client import ClientSettings, RateLimitedHttpClient

WIKIS_PATH = "/api/v2/wikis"


class WikiClient:
    """Client for Backlog wiki operations"""

    def __init__(
        self,
        http_client: RateLimitedHttpClient,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize wiki client

        Args:
            http_client: Rate-limit aware HTTP client carrying URL and API key
            logger: Logger (module logger if None)
        """
        self.http = http_client
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls, settings: ClientSettings, logger: Optional[logging.Logger] = None
    ) -> "WikiClient":
        return cls(RateLimitedHttpClient(settings, logger=logger), logger=logger)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "WikiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def list(self, project_key: str, pattern: Optional[str] = None) -> List[WikiPage]:
        """List wiki pages of a project

        Args:
            project_key: Project ID or key
            pattern: Optional regular expression the page name must match

        Returns:
            Pages without content, in API order

        Raises:
            ValueError: If project key is empty or pattern is not a valid regex
            BacklogAPIError: If the API answers with a non-200 status
        """
        if not project_key:
            raise ValueError("empty project key")

        matcher = None
        if pattern:
            try:
                matcher = re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid pattern {pattern!r}: {e}") from e

        request = self.http.build_request(
            "GET", WIKIS_PATH, params={"projectIdOrKey": project_key}
        )
        data = self._call(request, "failed to list wikis")
        if not isinstance(data, list):
            raise BacklogError(f"failed to list wikis: expected a JSON array, got {type(data).__name__}")
        pages = [self._parse_page(item) for item in data]

        if matcher is not None:
            pages = [page for page in pages if matcher.search(page.name)]

        self.logger.debug(f"Listed {len(pages)} wiki pages in {project_key}")
        return pages

    def get(self, wiki_id: int) -> WikiPage:
        """Get a wiki page with its content

        Raises:
            ValueError: If wiki_id is not positive
            BacklogAPIError: If the API answers with a non-200 status
        """
        if wiki_id <= 0:
            raise ValueError(f"invalid wikiId: {wiki_id}")

        request = self.http.build_request("GET", f"{WIKIS_PATH}/{wiki_id}")
        return self._parse_page(self._call(request, "failed to get wiki page"))

    def rename(self, page: Optional[WikiPage], old: str, new: str) -> str:
        """Rename a page by replacing every occurrence of old in its name

        Args:
            page: Page to rename
            old: Substring to replace, must not be empty
            new: Replacement

        Returns:
            New page name
        """
        if page is None:
            raise ValueError("empty wiki page")
        if not old:
            raise ValueError("old strings must not be empty")

        new_name = page.name.replace(old, new)
        request = self.http.build_request(
            "PATCH", f"{WIKIS_PATH}/{page.id}", data={"name": new_name}
        )
        self._call(request, "failed to update wiki page", parse=False)
        self.logger.info(f"Renamed wiki page {page.id}: {page.name} => {new_name}")
        return new_name

    def replace(self, page: Optional[WikiPage], pairs: Sequence[str]) -> str:
        """Replace strings in the content of a page

        Args:
            page: Page fetched with ``get`` (content is required)
            pairs: Flat sequence old1, new1, old2, new2, ...

        Returns:
            New page content
        """
        if page is None:
            raise ValueError("empty wiki page")
        new_content = replace_pairs(page.content or "", to_pairs(pairs))

        request = self.http.build_request(
            "PATCH", f"{WIKIS_PATH}/{page.id}", data={"content": new_content}
        )
        self._call(request, "failed to update wiki page content", parse=False)
        self.logger.info(f"Replaced content of wiki page {page.id}: {page.name}")
        return new_content

    def _call(self, request: requests.PreparedRequest, action: str, parse: bool = True):
        """Dispatch a request and decode its JSON body

        Raises:
            BacklogAPIError: If status is not 200
            BacklogError: If the body is not valid JSON
        """
        with self.http.dispatch(request) as response:
            if response.status_code != 200:
                message = extract_error_message(response)
                self.logger.debug(f"{action}: status {response.status_code}: {message}")
                raise BacklogAPIError(action, response.status_code, message)
            if not parse:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise BacklogError(f"{action}: invalid response body: {e}") from e

    @staticmethod
    def _parse_page(item) -> WikiPage:
        try:
            return WikiPage.model_validate(item)
        except ValidationError as e:
            raise BacklogError(f"unexpected wiki page payload: {e}") from e
