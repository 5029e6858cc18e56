"""List and label models for taskplanner."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from taskplanner.models.constants import (
    DEFAULT_LABEL_COLOR,
    DEFAULT_LABEL_ICON,
    DEFAULT_LIST_COLOR,
    DEFAULT_LIST_ICON,
)


class TaskList(BaseModel):
    """A named container of tasks. Exactly one list is the default (Inbox)."""

    id: str = Field(..., description="Unique list identifier")
    name: str = Field(..., description="List name")
    color: str = Field(DEFAULT_LIST_COLOR, description="Display color")
    icon: str = Field(DEFAULT_LIST_ICON, description="Display icon")
    is_default: bool = Field(False, description="Whether this is the default inbox list")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class Label(BaseModel):
    """A tag that can be attached to many tasks."""

    id: str = Field(..., description="Unique label identifier")
    name: str = Field(..., description="Label name (matched case-insensitively by quick add)")
    color: str = Field(DEFAULT_LABEL_COLOR, description="Display color")
    icon: str = Field(DEFAULT_LABEL_ICON, description="Display icon")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class ListCreate(BaseModel):
    name: str = Field(..., min_length=1)
    color: str = DEFAULT_LIST_COLOR
    icon: str = DEFAULT_LIST_ICON


class ListUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    color: Optional[str] = None
    icon: Optional[str] = None


class LabelCreate(BaseModel):
    name: str = Field(..., min_length=1)
    color: str = DEFAULT_LABEL_COLOR
    icon: str = DEFAULT_LABEL_ICON


class LabelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    color: Optional[str] = None
    icon: Optional[str] = None
