"""Style and item-type schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _clean_field_names(names: List[str]) -> List[str]:
    """Drop blanks and duplicates while keeping order."""
    cleaned: List[str] = []
    for name in (n.strip() for n in names):
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned


class StyleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    image: Optional[str] = Field(default=None, max_length=500)
    base_price: float = Field(default=0, ge=0)
    description: Optional[str] = None
    category: str = Field(default="Other", min_length=1, max_length=100)


class StyleResponse(BaseModel):
    id: str
    name: str
    image: Optional[str] = None
    base_price: float
    description: Optional[str] = None
    category: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ItemTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    fields: List[str] = Field(default_factory=list)
    image: Optional[str] = Field(default=None, max_length=500)

    @field_validator("fields")
    @classmethod
    def clean_fields(cls, v: List[str]) -> List[str]:
        return _clean_field_names(v)


class ItemTypeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    fields: Optional[List[str]] = None
    image: Optional[str] = Field(default=None, max_length=500)

    @field_validator("fields")
    @classmethod
    def clean_fields(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return None if v is None else _clean_field_names(v)


class ItemTypeResponse(BaseModel):
    id: str
    name: str
    fields: List[str]
    image: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
