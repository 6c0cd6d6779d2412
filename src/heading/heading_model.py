from pydantic import Field, model_validator
from typing import Optional
from typing_extensions import Self

from database.models.base import DocumentModel
from utils.common_models import CaseInsensitiveEnum

class HeadingType(str, CaseInsensitiveEnum):
    TEXT = 'text'
    NUMBER = 'number'
    DATE = 'date'
    SELECT = 'select'
    BOOLEAN = 'boolean'
    TEXTAREA = 'textarea'

class PropertyHeading(DocumentModel):
    """
    A configurable field shown on property pages.

    ``options`` only means something for ``select`` headings and is dropped
    for every other type.
    """
    name: str = Field(..., min_length=1, description='Machine name of the field')
    display_name: str = Field(..., min_length=1, description='Label shown to users')
    type: HeadingType = HeadingType.TEXT
    order: int = Field(default=1, ge=1, description='Position in the heading list, 1-based')
    required: bool = False
    visible: bool = True
    options: Optional[list[str]] = None

    @model_validator(mode='after')
    def options_only_for_select(self) -> Self:
        if self.type != HeadingType.SELECT:
            self.options = None
        elif self.options is not None:
            self.options = [option.strip() for option in self.options if option and option.strip()]
        return self

    @staticmethod
    def parse_options(raw: Optional[str]) -> list[str]:
        """Comma separated options as typed into the heading form."""
        return [option.strip() for option in (raw or "").split(',') if option.strip()]
