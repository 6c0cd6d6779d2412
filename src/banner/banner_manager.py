from typing import List, Optional

from config.config import settings
from database.repository.base_repository import BaseRepository
from gcp.storage import StorageManager
from gcp.storage_model import UploadedFile
from banner.banner_model import Banner
from utils.common_models import ActionResult


class BannerManager(BaseRepository[Banner]):
    model = Banner
    collection = settings.GCP.Firestore.BANNERS_COLLECTION_NAME
    order_by = 'createdAt'
    descending = True
    entity_name = "Banner"

    def list_banners(self) -> ActionResult[List[Banner]]:
        return self.get_all()

    def get_banner(self, banner_id: str) -> ActionResult[Banner]:
        return self.get_by_id(banner_id)

    def add_banner(self, banner: Banner) -> ActionResult[str]:
        return self.create(banner)

    def update_banner(self, banner_id: str, banner: Banner) -> ActionResult[str]:
        return self.update(banner_id, banner)

    def delete_banner(self, banner_id: str) -> ActionResult[str]:
        return self.delete(banner_id)

    def upload_banner_image(self, file: Optional[UploadedFile], banner_id: str) -> ActionResult[str]:
        return self._upload_file(
            file,
            lambda filename: StorageManager.banner_image_path(banner_id, filename)
        )

    def delete_banner_image(self, image_path: str) -> ActionResult[str]:
        return self._delete_file(image_path)
