"""
Pydantic models for site content
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from ..domain.content import ContentRecord


class ContentWrite(BaseModel):
    """Form values for a create or full-replace update (all columns)"""
    fields: Dict[str, Any] = Field(default_factory=dict)


class ContentItem(BaseModel):
    """One list row: the full record plus its display summary"""
    id: Optional[str] = None
    label: str
    sub: str
    data: Dict[str, Any]

    @classmethod
    def from_record(cls, record: ContentRecord) -> "ContentItem":
        label, sub = record.summary()
        return cls(id=record.id, label=label, sub=sub or "", data=record.to_dict())


class CollectionResponse(BaseModel):
    """Ordered collection as currently held by the dashboard"""
    collection: str
    items: List[ContentItem]
    error: Optional[str] = None


class SiteContentResponse(BaseModel):
    """Everything the public site sections render"""
    services: List[Dict[str, Any]] = Field(default_factory=list)
    employees: List[Dict[str, Any]] = Field(default_factory=list)
    projects: List[Dict[str, Any]] = Field(default_factory=list)
    industries: List[Dict[str, Any]] = Field(default_factory=list)
    stats: List[Dict[str, Any]] = Field(default_factory=list)
