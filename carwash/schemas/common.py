"""Shared schema pieces."""

from pydantic import BaseModel


class PageMeta(BaseModel):
    current_page: int
    last_page: int
    per_page: int
    total: int
