from pydantic import Field, EmailStr, field_validator
from typing import Optional, Any

from database.models.base import DocumentModel
from utils.common_models import CaseInsensitiveEnum
from logger import logger

class LeadStatus(str, CaseInsensitiveEnum):
    NEW = 'New'
    CONTACTED = 'Contacted'
    QUALIFIED = 'Qualified'
    UNQUALIFIED = 'Unqualified'

class Lead(DocumentModel):
    name: str = Field(default="", description='Name of the enquirer')
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    property_label: Optional[str] = Field(default=None, alias='property', description='Denormalized title of the property enquired about')
    message: Optional[str] = None
    status: LeadStatus = LeadStatus.NEW

    @field_validator('email', mode='before')
    @classmethod
    def blank_email(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator('status', mode='before')
    @classmethod
    def unknown_status_is_new(cls, value: Any) -> Any:
        if not value:
            return LeadStatus.NEW
        try:
            return LeadStatus(value)
        except ValueError:
            logger.warning(f"[LEAD] Unknown lead status '{value}', treating as {LeadStatus.NEW.value}")
            return LeadStatus.NEW
