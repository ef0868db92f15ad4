# layout_service/panel_schema.py
"""
Structural contract of a panel Layout Document.

A document is an ordered list of Part. A Part may carry a nested Layout
whose `parts` resolve back to the same Part model, so the tree can be
arbitrarily deep. Extra keys are tolerated and kept as-is.
"""
from typing import Annotated, List, Optional

from pydantic import AllowInfNan, BaseModel, ConfigDict, Field, StrictFloat, StrictStr, TypeAdapter

FiniteNumber = Annotated[StrictFloat, AllowInfNan(False)]

# Exactly two numbers: position, origin, anchor, dimensions, panelDimensions
Pair = Annotated[List[FiniteNumber], Field(min_length=2, max_length=2)]

PART_REQUIRED_FIELDS = ("id", "type", "position", "origin", "anchor", "dimensions", "name")
LAYOUT_REQUIRED_FIELDS = ("panelDimensions", "units", "name")


class Layout(BaseModel):
    model_config = ConfigDict(extra="allow")

    panelDimensions: Pair
    units: StrictStr
    name: StrictStr
    # render/stacking order
    parts: Optional[List["Part"]] = None


class Part(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: StrictStr
    type: StrictStr
    position: Pair
    origin: Pair
    anchor: Pair
    dimensions: Pair
    name: StrictStr
    partId: Optional[StrictStr] = None
    layout: Optional[Layout] = None


Layout.model_rebuild()

PANEL_DOCUMENT = TypeAdapter(List[Part])


def panel_json_schema() -> dict:
    """JSON Schema of a whole Layout Document, with Part referenced through $defs."""
    return PANEL_DOCUMENT.json_schema()
