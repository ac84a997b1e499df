"""Schemas for city, district and ward reference data."""

from pydantic import BaseModel, ConfigDict, Field


class CityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: int
    name: str


class DistrictOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: int
    name: str
    city_code: int


class WardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: int
    name: str
    district_code: int


class GeoUpdateRequest(BaseModel):
    """Only the display name of reference data is editable."""

    name: str = Field(..., min_length=1, max_length=255)
