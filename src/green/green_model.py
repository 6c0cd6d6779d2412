from pydantic import Field

from database.models.base import DocumentModel

class GoGreenEntry(DocumentModel):
    name: str = Field(default="", description='Participant name')
    phone: str = Field(default="", description='Participant phone number')
    image: str = Field(default="", description='Download URL of the submitted photo')
