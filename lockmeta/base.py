"""
Base condition type that all access-control condition variants must inherit from
"""

from typing import Any

from pydantic import BaseModel, Field


class BaseConditions(BaseModel):
    kind: str
    conditions: list[dict[str, Any]] = Field(min_length=1)
