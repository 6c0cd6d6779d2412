from pydantic import Field, field_validator
from typing import Optional, Any

from database.models.base import DocumentModel, blank_to_none
from utils.common_models import CaseInsensitiveEnum

class BannerStatus(str, CaseInsensitiveEnum):
    ACTIVE = 'Active'
    SCHEDULED = 'Scheduled'
    EXPIRED = 'Expired'

class Banner(DocumentModel):
    title: str = Field(default="", description='Headline shown on the banner')
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, description='Download URL of the banner image')
    link: Optional[str] = Field(default=None, description='Where the banner points to')
    position: Optional[int] = Field(default=None, description='Slot on the website, lower shows first')
    status: BannerStatus = BannerStatus.ACTIVE
    start_date: Optional[str] = Field(default=None, description='ISO date the banner goes live')
    end_date: Optional[str] = Field(default=None, description='ISO date the banner expires')

    @field_validator('position', mode='before')
    @classmethod
    def blank_position(cls, value: Any) -> Any:
        return blank_to_none(value)
