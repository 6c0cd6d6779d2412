from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, field_validator

from config.config import settings
from database.models.base import blank_to_none
from property.property_model import Property

ANY = "any"

LISTING_INTENT_LABELS = {
    "sell": "For Sale",
    "rent": "For Rent",
    "lease": "For Lease",
    "new project": "New Project",
}

ACTIVE_STATUSES = {"active", "sale"}
PENDING_STATUSES = {"pending", "under-construction"}
SOLD_STATUSES = {"sold"}


class PropertyFilter(BaseModel):
    """
    Filter criteria from the properties dashboard.

    Unset, blank and ``"any"`` values are no-ops. All active criteria are
    ANDed together.
    """
    status: Optional[str] = None
    property_type: Optional[str] = None
    listing_intent: Optional[str] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    bedrooms: Optional[float] = Field(default=None, ge=0, description='Minimum number of bedrooms')
    bathrooms: Optional[float] = Field(default=None, ge=0, description='Minimum number of bathrooms')
    published_by: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    exact_date: Optional[date] = Field(default=None, description='Narrows the date range result to one calendar day')

    @field_validator('status', 'property_type', 'listing_intent', 'published_by', mode='before')
    @classmethod
    def normalize_choice(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value or value.lower() == ANY:
                return None
        return value

    @field_validator('min_price', 'max_price', 'bedrooms', 'bathrooms',
                     'start_date', 'end_date', 'exact_date', mode='before')
    @classmethod
    def blank_or_any_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and value.strip().lower() == ANY:
            return None
        return blank_to_none(value)

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> 'PropertyFilter':
        """Builds a filter from query string parameters, ignoring unknown keys."""
        return cls.model_validate({name: params.get(name) for name in cls.model_fields if name in params})

    @property
    def has_date_filter(self) -> bool:
        return any((self.start_date, self.end_date, self.exact_date))

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


def _equals_ignore_case(value: Optional[str], expected: str) -> bool:
    return (value or "").lower() == expected.lower()


def _contains_ignore_case(value: Optional[str], needle: str) -> bool:
    return needle.lower() in (value or "").lower()


def _calendar_day(moment: datetime) -> date:
    if moment.tzinfo is not None:
        moment = moment.astimezone(ZoneInfo(settings.General.TIMEZONE))
    return moment.date()


def matches_search(property: Property, search_query: Optional[str]) -> bool:
    query = (search_query or "").strip()
    if not query:
        return True
    return any(
        _contains_ignore_case(value, query)
        for value in (property.title, property.address, property.city, property.published_by)
    )


def matches_filter(property: Property, filters: PropertyFilter) -> bool:
    if filters.status and not _equals_ignore_case(property.status, filters.status):
        return False
    if filters.property_type and not _equals_ignore_case(property.property_type, filters.property_type):
        return False
    if filters.listing_intent and not _equals_ignore_case(property.listing_intent, filters.listing_intent):
        return False

    price = property.effective_price
    if filters.min_price is not None and price < filters.min_price:
        return False
    if filters.max_price is not None and price > filters.max_price:
        return False

    if filters.bedrooms is not None and (property.bedrooms or 0) < filters.bedrooms:
        return False
    if filters.bathrooms is not None and (property.bathrooms or 0) < filters.bathrooms:
        return False

    if filters.published_by and not _contains_ignore_case(property.published_by, filters.published_by):
        return False

    if filters.has_date_filter:
        if property.created_at is None:
            return False
        created_on = _calendar_day(property.created_at)
        if filters.start_date and created_on < filters.start_date:
            return False
        if filters.end_date and created_on > filters.end_date:
            return False
        if filters.exact_date and created_on != filters.exact_date:
            return False

    return True


def filter_properties(properties: Iterable[Property], filters: Optional[PropertyFilter] = None, search_query: Optional[str] = None) -> list[Property]:
    """
    Returns the properties matching every active criterion and the free text
    search, in their original order. The input is never modified.
    """
    filters = filters or PropertyFilter()
    return [
        property for property in properties
        if matches_search(property, search_query) and matches_filter(property, filters)
    ]


class PropertyStats(BaseModel):
    total: int = 0
    active: int = 0
    pending: int = 0
    sold: int = 0
    total_value: float = 0

    @property
    def active_share(self) -> int:
        """Percentage of the inventory that is active, rounded."""
        return round(self.active / self.total * 100) if self.total else 0


def property_stats(properties: Iterable[Property]) -> PropertyStats:
    stats = PropertyStats()
    for property in properties:
        status = (property.status or "").lower()
        stats.total += 1
        stats.total_value += property.effective_price
        if not status or status in ACTIVE_STATUSES:
            stats.active += 1
        elif status in PENDING_STATUSES:
            stats.pending += 1
        elif status in SOLD_STATUSES:
            stats.sold += 1
    return stats


def format_listing_intent(intent: Optional[str]) -> str:
    if not intent:
        return LISTING_INTENT_LABELS["sell"]
    key = intent.lower().replace("-", " ")
    return LISTING_INTENT_LABELS.get(key, intent[:1].upper() + intent[1:])


def _group_indian(number: int) -> str:
    digits = str(abs(number))
    if len(digits) <= 3:
        grouped = digits
    else:
        head, tail = digits[:-3], digits[-3:]
        pairs = []
        while len(head) > 2:
            pairs.insert(0, head[-2:])
            head = head[:-2]
        grouped = ",".join([head] + pairs + [tail])
    return f"-{grouped}" if number < 0 else grouped


def _trim_decimal(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_indian_compact_currency(amount: Optional[float]) -> str:
    """
    >>> format_indian_compact_currency(12000000)
    '₹1.2 Cr'
    >>> format_indian_compact_currency(550000)
    '₹5.5 L'
    >>> format_indian_compact_currency(12500)
    '₹12,500'
    """
    amount = amount or 0
    if abs(amount) >= 1e7:
        return f"₹{_trim_decimal(amount / 1e7)} Cr"
    if abs(amount) >= 1e5:
        return f"₹{_trim_decimal(amount / 1e5)} L"
    return f"₹{_group_indian(int(round(amount)))}"


if __name__ == '__main__':
    from rich import print

    sample = [
        Property(title="Sea View", price=12000000, bedrooms=2, city="Mumbai"),
        Property(title="Hilltop", price=5000000, bedrooms=3, city="Pune"),
    ]
    print(filter_properties(sample, PropertyFilter(min_price=6000000, max_price=20000000)))
    print(property_stats(sample))
