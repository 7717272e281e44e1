from typing import Any, Union
from pydantic import BaseModel

class FetchOk(BaseModel):
    """Upstream call settled with a (possibly empty) payload."""
    value: Any

class FetchFailed(BaseModel):
    """Upstream call failed; the reason is kept for logging only."""
    reason: str

FetchResult = Union[FetchOk, FetchFailed]
