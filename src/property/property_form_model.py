from pydantic import BaseModel, Field, AfterValidator, field_validator
from typing import Annotated, Any, Optional

from database.models.base import blank_to_none


def at_least(label: str, length: int) -> AfterValidator:
    def check(value: str) -> str:
        if len(value.strip()) < length:
            raise ValueError(f"{label} must be at least {length} characters")
        return value
    return AfterValidator(check)


def not_negative(label: str) -> AfterValidator:
    def check(value: float) -> float:
        if value < 0:
            raise ValueError(f"{label} must be 0 or more")
        return value
    return AfterValidator(check)


class PropertyFormValues(BaseModel):
    """
    Scalar inputs of the property form with their validation rules.

    Array sections and uploaded media live on the form state, not here.
    """
    # Basic info
    title: Annotated[str, at_least("Title", 2)] = ""
    heading: Annotated[str, at_least("Heading", 2)] = ""
    description: Annotated[str, at_least("Description", 20)] = ""
    project_name: Annotated[str, at_least("Project name", 2)] = ""
    project_id: Annotated[str, at_least("Project ID", 2)] = ""
    assigned_sale_member: str = ""
    company_name: str = ""
    assigned_sale_member_phone: str = ""
    assigned_sale_member_photo: str = ""
    published_by: str = ""
    starting_price: Annotated[float, not_negative("Price")] = 0

    # Details
    property_type: str = "residential"
    property_subtype: str = "flat-apartment"
    purpose: str = "new project"
    listing_intent: str = "sell"
    possess_status: str = "sale"

    # Building
    floors: Annotated[int, not_negative("Floors")] = 0
    towers: Annotated[int, not_negative("Towers")] = 1
    wings: Annotated[int, not_negative("Wings")] = 0
    basements: Annotated[int, not_negative("Basements")] = 0
    podium_levels: Annotated[int, not_negative("Podium levels")] = 0
    parking_available: bool = False
    construction_technology: str = ""
    builder_date: str = "TBD"
    possession_date: str = "TBD"
    land_area: str = ""
    rera_number: str = ""
    rera_date: str = ""

    # Location
    address: Annotated[str, at_least("Address", 5)] = ""
    city: Annotated[str, at_least("City", 2)] = ""
    state: Annotated[str, at_least("State", 2)] = ""
    country: Annotated[str, at_least("Country", 2)] = "India"
    pincode: str = ""
    map_link: str = ""
    location_image_url: str = ""

    # Media
    details_pdf: str = ""
    virtual_tour_link: str = ""

    published: bool = False

    @field_validator('starting_price', 'floors', 'towers', 'wings', 'basements', 'podium_levels', mode='before')
    @classmethod
    def blank_number_is_zero(cls, value: Any) -> Any:
        value = blank_to_none(value)
        return 0 if value is None else value

    @field_validator('parking_available', 'published', mode='before')
    @classmethod
    def checkbox(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return False
        return value

    @field_validator(
        'title', 'heading', 'description', 'project_name', 'project_id', 'assigned_sale_member',
        'company_name', 'assigned_sale_member_phone', 'assigned_sale_member_photo', 'published_by',
        'property_type', 'property_subtype', 'purpose', 'listing_intent', 'possess_status',
        'construction_technology', 'builder_date', 'possession_date', 'land_area', 'rera_number',
        'rera_date', 'address', 'city', 'state', 'country', 'pincode', 'map_link',
        'location_image_url', 'details_pdf', 'virtual_tour_link',
        mode='before'
    )
    @classmethod
    def none_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class FormTab(BaseModel):
    id: str
    label: str
    fields: tuple[str, ...] = Field(default=(), description='Fields checked before leaving the tab forward')


FORM_TABS = (
    FormTab(id="basic", label="Basic Info",
            fields=("title", "heading", "description", "project_name", "project_id", "starting_price")),
    FormTab(id="details", label="Details",
            fields=("property_type", "property_subtype", "purpose", "listing_intent", "possess_status")),
    FormTab(id="building", label="Building",
            fields=("floors", "towers", "wings", "basements", "podium_levels")),
    FormTab(id="features", label="Features"),
    FormTab(id="location", label="Location",
            fields=("address", "city", "state", "country")),
    FormTab(id="media", label="Media"),
)

TABS_BY_ID = {tab.id: tab for tab in FORM_TABS}

BUILDING_TAB = "building"
FEATURES_TAB = "features"

# string list sections, keyed by the form field holding the staged input
STRING_SECTIONS = {
    "amenities": "new_amenity",
    "highlights": "new_highlight",
    "key_features": "new_key_feature",
    "payment_plans": "new_payment_plan",
    "videos": "new_video",
}

NEARBY_PLACES_SECTION = "nearby_places"
UNIT_TYPES_SECTION = "unit_types"
IMAGES_SECTION = "images"

ARRAY_SECTIONS = tuple(STRING_SECTIONS) + (NEARBY_PLACES_SECTION, UNIT_TYPES_SECTION, IMAGES_SECTION)


class UnitTypeDraft(BaseModel):
    """Staged unit type inputs before they are added to the list."""
    type: str = ""
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    size: Optional[float] = None
    price: Optional[float] = None
    additional_info: str = ""

    @field_validator('bedrooms', 'bathrooms', 'size', 'price', mode='before')
    @classmethod
    def blank_numbers(cls, value: Any) -> Any:
        return blank_to_none(value)

    def is_blank(self) -> bool:
        return not self.type.strip()
