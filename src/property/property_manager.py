from typing import Any, Dict, List, Optional, Union

from logger import logger
from config.config import settings
from database.repository.base_repository import BaseRepository
from gcp.storage import StorageManager
from gcp.storage_model import UploadedFile
from property.property_model import Property, ListingIntent
from utils.common_models import ActionResult


class PropertyManager(BaseRepository[Property]):
    """
    Backend client for property listings and their media.

    Listing loads the whole collection in store order; sorting and filtering
    happen in the dashboard (see ``property.property_filter``).
    """
    model = Property
    collection = settings.GCP.Firestore.PROPERTIES_COLLECTION_NAME
    entity_name = "Property"

    def _to_document(self, item: Union[Property, Dict[str, Any]]) -> Dict[str, Any]:
        if isinstance(item, Property):
            return item.normalized_document()
        return super()._to_document(item)

    def list_properties(self) -> ActionResult[List[Property]]:
        return self.get_all()

    def get_property(self, property_id: str) -> ActionResult[Property]:
        return self.get_by_id(property_id)

    def add_property(self, property: Property) -> ActionResult[str]:
        logger.info(f"[PROPERTY_MANAGER] Adding property '{property.title}'")
        return self.create(property)

    def update_property(self, property_id: str, property: Property) -> ActionResult[str]:
        logger.info(f"[PROPERTY_MANAGER] Updating property '{property_id}'")
        # fields the caller never set are left as stored
        return self.update(property_id, property.normalized_document(exclude_unset=True))

    def delete_property(self, property_id: str) -> ActionResult[str]:
        return self.delete(property_id)

    def update_listing_intent(self, property_id: str, listing_intent: str) -> ActionResult[str]:
        try:
            intent = ListingIntent(listing_intent)
        except ValueError:
            logger.warning(f"[PROPERTY_MANAGER] Rejected listing intent '{listing_intent}' for property '{property_id}'")
            return ActionResult.fail(f"Invalid listing intent: {listing_intent}")
        return self.update(property_id, {'listingIntent': intent.value})

    def upload_property_image(self, file: Optional[UploadedFile], property_id: str) -> ActionResult[str]:
        return self._upload_file(
            file,
            lambda filename: StorageManager.property_media_path(property_id, filename)
        )

    def delete_property_image(self, image_path: str) -> ActionResult[str]:
        return self._delete_file(image_path)

    def update_property_images(self, property_id: str, images: List[str]) -> ActionResult[str]:
        return self.update(property_id, {'images': images})
