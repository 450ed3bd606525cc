"""Error body schema shared by every failure response."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """JSON body written by a failure signal.

    ``errors`` is omitted from the rendered body when it is ``None``.
    """

    status_code: int
    message: str
    errors: Any = None
