# File: campus_issues/schemas/map.py

from typing import Annotated, Literal, Optional
from pydantic import BaseModel, Field

# position on the map surface, as a percentage of its width / height
Percent = Annotated[float, Field(ge=0, le=100)]


class MapPinOut(BaseModel):
    id: str
    lat: float
    lng: float
    title: str
    description: str = ""
    type: Literal["issue", "custom"]
    x: float
    y: float


class LocateIn(BaseModel):
    x: Percent
    y: Percent


class LocateOut(BaseModel):
    lat: float
    lng: float
    address: str


class CustomPinIn(BaseModel):
    x: Percent
    y: Percent
    title: str = ""
    description: Optional[str] = ""
