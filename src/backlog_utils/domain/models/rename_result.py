"""RenameResult model - outcome of renaming one wiki page"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RenameResult:
    """Old and new name of a renamed page"""

    page_id: int
    old_name: str
    new_name: str
