"""
Validation schemas for independently validated sub-documents.

Each schema describes what a sub-document must contain to count as
Complete. Partial data is expected and allowed to persist; these schemas
only drive the displayed status (see status.py).

Unknown keys are ignored, which includes the cached `_meta` key.
"""

from datetime import date, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")


class LocationSchema(_Schema):
    lat: float
    lng: float


class AddressSchema(_Schema):
    formatted: str = Field(min_length=1)
    line1: str = Field(min_length=1)
    line2: Optional[str] = None
    line3: Optional[str] = None
    city: str = Field(min_length=1)
    county: Optional[str] = None
    postcode: str = Field(min_length=1)
    location: LocationSchema


class SurveyImageSchema(_Schema):
    path: str
    isArchived: bool = False
    hasMetadata: bool = False


class ReportDetailsSchema(_Schema):
    clientName: str = Field(min_length=1)
    address: AddressSchema
    # Saved either as plain dates or as full ISO timestamps
    inspectionDate: Union[datetime, date]
    reportDate: Union[datetime, date]
    level: Literal["2", "3"]
    reference: str = Field(min_length=1)
    weather: str = Field(min_length=1)
    orientation: str = Field(min_length=1)
    situation: str = Field(min_length=1)
    moneyShot: List[SurveyImageSchema] = Field(min_length=1)
    frontElevationImagesUri: List[SurveyImageSchema] = Field(min_length=4)


class PropertyDescriptionSchema(_Schema):
    propertyType: str = Field(min_length=1)
    constructionDetails: str = Field(min_length=1)
    yearOfConstruction: str = Field(min_length=1)
    yearOfExtensions: Optional[str] = None
    yearOfConversions: Optional[str] = None
    grounds: str = Field(min_length=1)
    services: str = Field(min_length=1)
    otherServices: Optional[str] = None
    energyRating: str = Field(min_length=1)
    numberOfBedrooms: int = Field(ge=0)
    numberOfBathrooms: int = Field(ge=0)
    tenure: Literal["Freehold", "Leasehold", "Commonhold", "Other", "Unknown"]


class ChecklistItemSchema(_Schema):
    label: str = ""
    type: str = "checkbox"
    value: Optional[bool] = None
    required: bool = False
    order: int = 0


class ChecklistSchema(_Schema):
    items: List[ChecklistItemSchema]

    @field_validator("items")
    @classmethod
    def required_items_checked(cls, items):
        if not items:
            raise ValueError("Checklist has no items")
        unchecked = [item.label or f"#{item.order}" for item in items if item.required and item.value is not True]
        if unchecked:
            raise ValueError(f"Required items not checked: {', '.join(unchecked)}")
        return items


class ElementSectionSchema(_Schema):
    description: str
    images: List[SurveyImageSchema]

    @field_validator("description")
    @classmethod
    def description_present(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Description is required")
        return value

    @field_validator("images")
    @classmethod
    def has_active_image(cls, images):
        if not any(not img.isArchived for img in images):
            raise ValueError("At least one photo is required")
        return images
