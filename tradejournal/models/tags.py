"""Tag, setup and category data models."""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field


class TagRelationships(BaseModel):
    """Directed relationship sets of a tag, keyed by tag id.

    The sets may be authored asymmetrically: A excluding B does not imply
    that B lists A.
    """

    mutually_exclusive_with: list[str] = Field(
        default_factory=list, description="Tag ids that cannot be combined"
    )
    suggested_with: list[str] = Field(
        default_factory=list, description="Tag ids to suggest alongside"
    )
    required_with: list[str] = Field(
        default_factory=list, description="Tag ids that should accompany this tag"
    )

    model_config = {"frozen": True}


class Category(BaseModel):
    """Grouping for tags or setups."""

    id: str = Field(..., min_length=1, description="Category identifier")
    name: str = Field(..., min_length=1, description="Display name")
    kind: Literal["tag", "setup"] = Field(..., description="What the category groups")
    color: Optional[str] = Field(default=None, description="Hex color")
    is_active: bool = Field(default=True, description="Whether the category is shown")

    model_config = {"frozen": True}


class CustomTag(BaseModel):
    """User-defined tag with an optional relationship graph."""

    id: str = Field(..., min_length=1, description="Tag identifier")
    name: str = Field(..., min_length=1, description="Tag name used on trades")
    description: Optional[str] = Field(default=None, description="Description")
    color: Optional[str] = Field(default=None, description="Hex color")
    category_id: Optional[str] = Field(default=None, description="Category reference")
    is_active: bool = Field(default=True, description="Whether the tag can be selected")
    is_favorite: bool = Field(default=False, description="Pinned tag")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Creation timestamp"
    )
    usage_count: int = Field(default=0, ge=0, description="Derived usage counter")
    relationships: TagRelationships = Field(
        default_factory=TagRelationships, description="Relationship graph"
    )

    model_config = {"frozen": True}


class CustomSetup(BaseModel):
    """User-defined setup with derived performance counters."""

    id: str = Field(..., min_length=1, description="Setup identifier")
    name: str = Field(..., min_length=1, description="Setup label used on trades")
    description: Optional[str] = Field(default=None, description="Description")
    color: Optional[str] = Field(default=None, description="Hex color")
    category_id: Optional[str] = Field(default=None, description="Category reference")
    is_active: bool = Field(default=True, description="Whether the setup can be selected")
    is_favorite: bool = Field(default=False, description="Pinned setup")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Creation timestamp"
    )
    usage_count: int = Field(default=0, ge=0, description="Derived usage counter")
    win_rate: Optional[float] = Field(default=None, description="Derived win rate")
    avg_rr: Optional[float] = Field(default=None, description="Derived average R")
    total_pnl: Optional[float] = Field(default=None, description="Derived total P&L")

    model_config = {"frozen": True}
