"""WikiPage model - represents a Backlog wiki page"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WikiPage(BaseModel):
    """Represents a wiki page as returned by the Backlog API

    The list endpoint omits ``content``; fetch the page by ID to get it.
    """

    id: int
    project_id: int = Field(0, alias="projectId")
    name: str
    content: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_json(self) -> str:
        """Serialize with API field names, omitting absent or empty content"""
        exclude = None if self.content else {"content"}
        return self.model_dump_json(by_alias=True, exclude_none=True, exclude=exclude)
