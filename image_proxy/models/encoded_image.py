from __future__ import annotations

from pydantic import BaseModel, Field

from .output_format import OutputFormat


class EncodedImage(BaseModel):
    content: bytes
    format: OutputFormat
    natural_width: int = Field(..., ge=1)
    natural_height: int = Field(..., ge=1)
    width: int = Field(..., ge=1)  # as served
    height: int = Field(..., ge=1)

    @property
    def resized(self) -> bool:
        return (self.width, self.height) != (self.natural_width, self.natural_height)
