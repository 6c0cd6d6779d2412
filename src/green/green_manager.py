from typing import List, Optional

from config.config import settings
from database.repository.base_repository import BaseRepository
from gcp.storage import StorageManager
from gcp.storage_model import UploadedFile
from green.green_model import GoGreenEntry
from utils.common_models import ActionResult


class GreenManager(BaseRepository[GoGreenEntry]):
    model = GoGreenEntry
    collection = settings.GCP.Firestore.GREEN_COLLECTION_NAME
    order_by = 'createdAt'
    descending = True
    entity_name = "Go Green entry"

    def list_entries(self) -> ActionResult[List[GoGreenEntry]]:
        return self.get_all()

    def create_entry(self, entry: GoGreenEntry) -> ActionResult[str]:
        return self.create(entry)

    def delete_entry(self, entry_id: str) -> ActionResult[str]:
        return self.delete(entry_id)

    def upload_green_photo(self, file: Optional[UploadedFile]) -> ActionResult[str]:
        return self._upload_file(file, StorageManager.green_photo_path)
