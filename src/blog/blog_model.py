from pydantic import Field, field_validator, model_validator
from typing import Optional, Any
from typing_extensions import Self

from database.models.base import DocumentModel
from utils.str_utils import generate_slug

class BlogPost(DocumentModel):
    title: str = Field(default="", description='Post title')
    slug: Optional[str] = Field(default=None, description='URL key, derived from the title when missing')
    content: str = Field(default="", description='Post body as HTML')
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    category: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    is_published: bool = False

    @field_validator('images', mode='before')
    @classmethod
    def ensure_list(cls, value: Any) -> Any:
        return value or []

    @model_validator(mode='after')
    def derive_slug(self) -> Self:
        if not self.slug and self.title:
            self.slug = generate_slug(self.title)
        return self

    @property
    def status_label(self) -> str:
        return "Published" if self.is_published else "Draft"
