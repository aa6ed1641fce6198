"""
API request/response models.
"""

from pydantic import BaseModel
from typing import Any, List, Optional, Union


class ApiErrorBody(BaseModel):
    """Error body returned by the backend."""
    message: Optional[Union[str, List[str]]] = None
    error: Optional[str] = None
    statusCode: Optional[int] = None

    @property
    def text(self) -> Optional[str]:
        if isinstance(self.message, list):
            return "; ".join(str(m) for m in self.message) or None
        return self.message or self.error


class Page(BaseModel):
    """Paginated list envelope."""
    items: List[Any]
    total: int
    page: int = 1
    total_pages: int = 1

    class Config:
        arbitrary_types_allowed = True
