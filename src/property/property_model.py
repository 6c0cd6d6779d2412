from pydantic import Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Any, ClassVar

from database.models.base import CamelModel, DocumentModel, blank_to_none
from utils.common_models import CaseInsensitiveEnum

PROPERTY_TYPES = [
    ("residential", "Residential"),
    ("commercial", "Commercial"),
    ("industrial", "Industrial"),
    ("land", "Land"),
]

PROPERTY_SUBTYPES_BY_TYPE = {
    "residential": [
        ("1-rk", "1 RK"),
        ("1-bhk", "1 BHK"),
        ("2-bhk", "2 BHK"),
        ("3-bhk", "3 BHK"),
        ("4-bhk", "4 BHK"),
        ("5-bhk", "5 BHK"),
        ("flat-apartment", "Flat/Apartment"),
        ("penthouse", "Penthouse"),
        ("row-house-duplex", "Row House/Duplex"),
        ("independent-bungalow-villa", "Independent Bungalow/Villa"),
        ("twin-flat", "Twin Flat"),
        ("studio-apartment", "Studio Apartment"),
        ("service-apartment", "Service Apartment"),
        ("terrace-flat", "Terrace Flat"),
    ],
    "commercial": [
        ("office", "Office"),
        ("corporate-office", "Corporate Office"),
        ("warehouse-godown", "Warehouse/Godown"),
        ("industrial-shed", "Industrial Shed"),
        ("call-center", "Call Center"),
        ("it-office", "IT Office"),
        ("it-park", "IT Park"),
        ("shop", "Shop"),
        ("showroom", "Showroom"),
        ("hotel", "Hotel"),
        ("restaurant", "Restaurant"),
        ("commercial-land-plot", "Commercial Land/Plot"),
        ("commercial-building", "Commercial Building"),
        ("kiosk", "Kiosk"),
        ("hospital", "Hospital"),
        ("school", "School"),
        ("factory", "Factory"),
        ("classes", "Classes"),
    ],
    "industrial": [
        ("industrial-gala", "Industrial Gala"),
        ("shop-in-retail-mall", "Shop in Retail Mall"),
        ("industrial-shed", "Industrial Shed"),
        ("industrial-building", "Industrial Building"),
        ("industrial-land", "Industrial Land"),
        ("factory", "Factory"),
        ("warehouse", "Warehouse"),
    ],
    "land": [
        ("residential-land-plot", "Residential Land/Plot"),
        ("agricultural-land-plot", "Agricultural Land/Plot"),
        ("commercial-land-plot", "Commercial Land/Plot"),
        ("industrial-land", "Industrial Land"),
        ("na-land-plot", "NA Land/Plot"),
        ("farm-house", "Farm House"),
        ("land-plot", "Land/Plot"),
        ("terrace-flat", "Terrace Flat"),
    ],
}

PURPOSES = [
    ("sell", "Sell"),
    ("resale", "Resale"),
    ("rental", "Rental"),
    ("new project", "New Project"),
]

LISTING_INTENTS = [
    ("sell", "Sell"),
    ("rent", "Rent"),
    ("lease", "Lease"),
    ("new-project", "New Project"),
]

POSSESS_STATUSES = [
    ("sale", "Sale"),
    ("sold", "Sold"),
    ("pre-launch", "Pre-Launch"),
    ("launch", "Launch"),
    ("under-construction", "Under Construction"),
    ("ready-to-move", "Ready to Move"),
]

COMMON_AMENITIES = [
    "Fitness Centre",
    "Rooftop Garden",
    "Swimming Pool",
    "Clubhouse",
    "Children's Play Area",
    "Landscaped Gardens",
    "24x7 Security",
    "Power Backup",
    "Parking",
    "Lift",
    "Rainwater Harvesting",
    "Visitor Parking",
    "Jogging Track",
    "Indoor Games",
    "Multipurpose Hall",
]

NEW_PROJECT_PURPOSE = "new project"


def is_new_project_purpose(purpose: Optional[str]) -> bool:
    return (purpose or "").lower().replace("-", " ") == NEW_PROJECT_PURPOSE


def subtypes_for(property_type: Optional[str]) -> list[tuple[str, str]]:
    return PROPERTY_SUBTYPES_BY_TYPE.get((property_type or "").lower(), [])


class ListingIntent(str, CaseInsensitiveEnum):
    SELL = "sell"
    RENT = "rent"
    LEASE = "lease"
    NEW_PROJECT = "new-project"


class NearbyPlace(CamelModel):
    name: str = Field(..., description='Name of the landmark')
    distance: str = Field(..., description='Free-form distance, e.g. "2 km"')


class UnitType(CamelModel):
    type: str = Field(..., description='Configuration label, e.g. "2 BHK"')
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None
    size: Optional[float] = Field(default=None, description='Carpet area')
    price: Optional[float] = None
    additional_info: Optional[str] = None

    @field_validator('bedrooms', 'bathrooms', 'size', 'price', mode='before')
    @classmethod
    def blank_numbers(cls, value: Any) -> Any:
        return blank_to_none(value)


class Property(DocumentModel):
    """A property listing as stored in the properties collection."""
    OPTIONAL_STRING_FIELDS: ClassVar[tuple[str, ...]] = (
        'assigned_sale_member', 'company_name', 'assigned_sale_member_phone',
        'assigned_sale_member_photo', 'pincode', 'map_link', 'location_image_url',
        'construction_technology', 'builder_date', 'possession_date', 'land_area',
        'rera_number', 'rera_date', 'details_pdf', 'virtual_tour_link',
    )

    # Basic info
    title: str = Field(default="", description='Listing title')
    heading: str = Field(default="", description='Short marketing heading')
    description: str = Field(default="", description='Long description')
    project_name: str = ""
    project_id: str = ""
    assigned_sale_member: Optional[str] = None
    company_name: Optional[str] = None
    assigned_sale_member_phone: Optional[str] = None
    assigned_sale_member_photo: Optional[str] = None
    published_by: Optional[str] = None

    # Classification
    property_type: Optional[str] = None
    property_subtype: Optional[str] = None
    purpose: Optional[str] = None
    listing_intent: Optional[str] = None
    possess_status: Optional[str] = None
    status: Optional[str] = Field(default=None, description='Legacy mirror of possess_status')

    # Location
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    pincode: Optional[str] = None
    map_link: Optional[str] = None
    location_image_url: Optional[str] = None

    # Pricing & size
    starting_price: Optional[float] = None
    price: Optional[float] = Field(default=None, description='Legacy price field, preferred over starting_price when set')
    bedrooms: Optional[float] = None
    bathrooms: Optional[float] = None

    # Building
    floors: Optional[int] = None
    towers: Optional[int] = None
    wings: Optional[int] = None
    basements: Optional[int] = None
    podium_levels: Optional[int] = None
    parking_available: bool = False
    construction_technology: Optional[str] = None
    builder_date: Optional[str] = None
    possession_date: Optional[str] = None
    land_area: Optional[str] = None
    rera_number: Optional[str] = None
    rera_date: Optional[str] = None

    # Media
    details_pdf: Optional[str] = None
    virtual_tour_link: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)

    # Sections
    amenities: list[str] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)
    key_features: list[str] = Field(default_factory=list)
    payment_plans: list[str] = Field(default_factory=list)
    nearby_places: list[NearbyPlace] = Field(default_factory=list)
    unit_types: list[UnitType] = Field(default_factory=list)

    published: bool = False

    @field_validator(
        'starting_price', 'price', 'bedrooms', 'bathrooms',
        'floors', 'towers', 'wings', 'basements', 'podium_levels',
        mode='before'
    )
    @classmethod
    def blank_numbers(cls, value: Any) -> Any:
        return blank_to_none(value)

    @field_validator('images', 'videos', 'amenities', 'highlights', 'key_features',
                     'payment_plans', 'nearby_places', 'unit_types', mode='before')
    @classmethod
    def ensure_list(cls, value: Any) -> Any:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator(*OPTIONAL_STRING_FIELDS, mode='before')
    @classmethod
    def blank_strings(cls, value: Any) -> Any:
        # stored as "" but read back as unset
        return blank_to_none(value)

    @field_validator('parking_available', mode='before')
    @classmethod
    def coerce_parking(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return False
        return value

    @property
    def effective_price(self) -> float:
        return self.price or self.starting_price or 0

    @property
    def is_new_project(self) -> bool:
        return is_new_project_purpose(self.purpose)

    def normalized_document(self, exclude_unset: bool = False) -> dict:
        """Stored form with optional strings written as "" rather than null."""
        document = self.to_document(exclude_unset=exclude_unset)
        for field_name in self.OPTIONAL_STRING_FIELDS:
            key = to_camel(field_name)
            if key in document and document[key] is None:
                document[key] = ""
        return document
