from __future__ import annotations

from pydantic import BaseModel, Field


class ProxyParams(BaseModel):
    """Validated query parameters of a signed proxy request."""

    url: str = Field(..., min_length=1)
    width: int | None = Field(default=None, ge=1)
    quality: int | None = Field(default=None, ge=1, le=100)
