"""Schemas for documents held by the similarity-search store."""

from typing import Any

from pydantic import BaseModel, Field


class Document(BaseModel):
    page_content: str = Field(..., min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)


class AddDocumentsResponse(BaseModel):
    added: int
