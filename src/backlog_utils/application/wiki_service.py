"""Service for bulk wiki operations"""

import logging
from typing import List, Optional, Sequence

from backlog_utils.domain.models.rename_result import RenameResult
from backlog_utils.domain.models.wiki_page import WikiPage
from backlog_utils.domain.text_replace import to_pairs
from backlog_utils.infrastructure.backlog.wiki_client import WikiClient


class WikiService:
    """Applies rename and replace operations to every matching page of a project"""

    def __init__(self, wiki_client: WikiClient, logger: Optional[logging.Logger] = None):
        self.wiki_client = wiki_client
        self.logger = logger or logging.getLogger(__name__)

    def rename_all(
        self, project_key: str, pattern: Optional[str], old: str, new: str
    ) -> List[RenameResult]:
        """Rename every page whose name matches pattern

        Stops at the first failing page; pages renamed before it stay renamed.

        Args:
            project_key: Project ID or key
            pattern: Optional regex filter on page names
            old: Substring to replace in page names
            new: Replacement

        Returns:
            One result per renamed page
        """
        if not old:
            raise ValueError("old strings must not be empty")

        pages = self.wiki_client.list(project_key, pattern)
        self.logger.info(f"Renaming {len(pages)} wiki pages in {project_key}")

        results = []
        for page in pages:
            new_name = self.wiki_client.rename(page, old, new)
            results.append(RenameResult(page_id=page.id, old_name=page.name, new_name=new_name))
        return results

    def replace_all(
        self, project_key: str, pattern: Optional[str], pairs: Sequence[str]
    ) -> List[WikiPage]:
        """Replace strings in the content of every page whose name matches pattern

        The listing carries no content, so each page is fetched before it is updated.

        Returns:
            The fetched pages that were updated
        """
        to_pairs(pairs)  # fail before touching any page

        pages = self.wiki_client.list(project_key, pattern)
        self.logger.info(f"Replacing content of {len(pages)} wiki pages in {project_key}")

        updated = []
        for page in pages:
            detail = self.wiki_client.get(page.id)
            self.wiki_client.replace(detail, pairs)
            updated.append(detail)
        return updated
