from pydantic import BaseModel, Field, model_validator
from typing import Optional, Generic, TypeVar, Any
from typing_extensions import Self
from enum import Enum

T = TypeVar('T')

class CaseInsensitiveEnum(Enum):
    """Enum class that enables case-insensitive matching."""
    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return super()._missing_(value)


class ActionResult(BaseModel, Generic[T]):
    """
    Envelope returned by every backend client function instead of raising.

    ``success`` is True with an optional ``data`` payload, or False with an
    ``error`` message.
    """
    success: bool = Field(
        ..., description='Whether the action succeeded'
    )
    data: Optional[T] = Field(
        default=None, description='Payload of a successful action'
    )
    error: Optional[str] = Field(
        default=None, description='Reason for failure'
    )

    @model_validator(mode='after')
    def validate_input(self) -> Self:
        if not self.success and not self.error:
            raise ValueError(
                    f"Failed action needs a reason"
                )
        return self

    @classmethod
    def ok(cls, data: Any = None) -> 'ActionResult':
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: Optional[str]) -> 'ActionResult':
        return cls(success=False, error=error or "Unknown error")


class Notification(BaseModel):
    """A toast shown once on the next rendered page."""
    class Level(str, CaseInsensitiveEnum):
        INFO = 'info'
        SUCCESS = 'success'
        ERROR = 'error'

    title: str
    description: Optional[str] = None
    level: Level = Level.INFO
