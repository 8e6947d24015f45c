"""Configuration models for report rendering."""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_RESOURCE_WIDTH = 30


class ReportConfig(BaseModel):
    """Controls how archive tables are rendered."""

    resource_width: int = Field(default=DEFAULT_RESOURCE_WIDTH, gt=0)
    show_summary: bool = True
