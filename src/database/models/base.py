from datetime import datetime
from typing import Any, Dict, Optional, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Attributes are snake_case in Python and camelCase in the stored document."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
    )


class DocumentModel(CamelModel):
    """
    Base model for documents kept in the document store.

    Unknown keys on legacy documents are ignored. ``id`` and the two
    timestamps are owned by the store and never written back.
    """
    SERVER_FIELDS: ClassVar[set[str]] = {'id', 'created_at', 'updated_at'}

    id: Optional[str] = Field(default=None, description='Store-assigned document ID')
    created_at: Optional[datetime] = Field(default=None, description='Set once by the server on creation')
    updated_at: Optional[datetime] = Field(default=None, description='Refreshed by the server on every write')

    def to_document(self, exclude_unset: bool = False) -> Dict[str, Any]:
        """Editable fields keyed the way they are stored, server fields excluded."""
        return self.model_dump(by_alias=True, exclude=self.SERVER_FIELDS, exclude_unset=exclude_unset, mode='json')

    def __repr__(self):
        return f"<{self.__class__.__name__}(id='{self.id}')>"


def blank_to_none(value: Any) -> Any:
    """Legacy documents store empty strings where a number is expected."""
    if isinstance(value, str) and not value.strip():
        return None
    return value
