from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Any

class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator('email', mode='before')
    @classmethod
    def strip_email(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value
