"""Structured error body returned by the Backlog API"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiErrorEntry(BaseModel):
    """Single entry of the ``errors`` list"""

    message: str = ""
    code: int = 0
    more_info: Optional[str] = Field(None, alias="moreInfo")

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error body: ``{"errors": [{"message": ..., "code": ..., "moreInfo": ...}]}``"""

    errors: List[ApiErrorEntry] = Field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.errors]
