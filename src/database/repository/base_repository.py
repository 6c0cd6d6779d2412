from typing import Generic, TypeVar, Type, Optional, List, Dict, Any, Union, Callable

from pydantic import ValidationError

from database.models.base import DocumentModel
from gcp.db import FirestoreStore, DocumentNotFoundError
from gcp.storage import StorageManager
from gcp.storage_model import UploadedFile
from utils.common_models import ActionResult
from logger import logger

ModelType = TypeVar("ModelType", bound=DocumentModel)


class BaseRepository(Generic[ModelType]):
    """
    Common CRUD operations over one collection.

    Every method returns an ``ActionResult``; store and validation errors are
    logged and turned into a failed result instead of propagating.
    """

    model: Type[ModelType]
    collection: str
    order_by: Optional[str] = None
    descending: bool = False
    entity_name: str = "Document"

    def __init__(self, store: FirestoreStore, storage: Optional[StorageManager] = None, collection: Optional[str] = None):
        self.store = store
        self.storage = storage
        if collection:
            self.collection = collection

    @property
    def tag(self) -> str:
        return self.__class__.__name__

    def _to_model(self, document: Dict[str, Any]) -> ModelType:
        return self.model.model_validate(document)

    def _to_document(self, item: Union[ModelType, Dict[str, Any]]) -> Dict[str, Any]:
        if isinstance(item, DocumentModel):
            return item.to_document()
        return dict(item)

    @staticmethod
    def _error_message(e: Exception, fallback: str) -> str:
        if isinstance(e, ValidationError):
            return f"{fallback}: {e.error_count()} invalid field(s)"
        return str(e) or fallback

    def get_all(self) -> ActionResult[List[ModelType]]:
        """Fetch the whole collection"""
        try:
            documents = self.store.stream(self.collection, order_by=self.order_by, descending=self.descending)
            items = [self._to_model(document) for document in documents]
            logger.debug(f"[{self.tag}] Found {len(items)} {self.entity_name} records")
            return ActionResult.ok(items)
        except Exception as e:
            logger.exception(f"[{self.tag}] Failed to get all {self.entity_name} records: {e}")
            return ActionResult.fail(self._error_message(e, f"Failed to fetch {self.entity_name.lower()} records"))

    def get_by_id(self, id: str) -> ActionResult[ModelType]:
        """Get record by ID"""
        try:
            if not id:
                raise ValueError(f"Invalid {self.entity_name.lower()} ID")
            document = self.store.get(self.collection, id)
            if document is None:
                raise DocumentNotFoundError(f"{self.entity_name} not found")
            return ActionResult.ok(self._to_model(document))
        except Exception as e:
            logger.error(f"[{self.tag}] Failed to get {self.entity_name} by id {id}: {e}")
            return ActionResult.fail(self._error_message(e, f"Failed to fetch {self.entity_name.lower()}"))

    def create(self, item: Union[ModelType, Dict[str, Any]]) -> ActionResult[str]:
        """Create a new record, returns its ID"""
        try:
            doc_id = self.store.add(self.collection, self._to_document(item))
            logger.info(f"[{self.tag}] Created {self.entity_name} with id: {doc_id}")
            return ActionResult.ok(doc_id)
        except Exception as e:
            logger.exception(f"[{self.tag}] Failed to create {self.entity_name}: {e}")
            return ActionResult.fail(self._error_message(e, f"Failed to add {self.entity_name.lower()} to database"))

    def update(self, id: str, fields: Union[ModelType, Dict[str, Any]]) -> ActionResult[str]:
        """Update the given fields of an existing record"""
        try:
            if not id:
                raise ValueError(f"Invalid {self.entity_name.lower()} ID")
            self.store.update(self.collection, id, self._to_document(fields))
            logger.info(f"[{self.tag}] Updated {self.entity_name} with id: {id}")
            return ActionResult.ok(id)
        except Exception as e:
            logger.exception(f"[{self.tag}] Failed to update {self.entity_name} {id}: {e}")
            return ActionResult.fail(self._error_message(e, f"Failed to update {self.entity_name.lower()}"))

    def delete(self, id: str) -> ActionResult[str]:
        """Hard delete by ID"""
        try:
            if not id:
                raise ValueError(f"Invalid {self.entity_name.lower()} ID")
            self.store.delete(self.collection, id)
            logger.info(f"[{self.tag}] Deleted {self.entity_name} with id: {id}")
            return ActionResult.ok(id)
        except Exception as e:
            logger.exception(f"[{self.tag}] Failed to delete {self.entity_name} {id}: {e}")
            return ActionResult.fail(self._error_message(e, f"Failed to delete {self.entity_name.lower()}"))

    # Blob helpers shared by entities that carry media

    def _upload_file(self, file: Optional[UploadedFile], object_path: Callable[[str], str]) -> ActionResult[str]:
        """Upload under the path built from the file name, returns the download URL"""
        path = None
        try:
            if self.storage is None:
                raise RuntimeError("Blob storage is not configured")
            if file is None or file.is_empty:
                raise ValueError("No file provided")
            path = object_path(file.filename)
            url = self.storage.upload(path=path, file=file)
            return ActionResult.ok(url)
        except Exception as e:
            logger.exception(f"[{self.tag}] Failed to upload '{path}': {e}")
            return ActionResult.fail(self._error_message(e, "Failed to upload file"))

    def _delete_file(self, path_or_url: str) -> ActionResult[str]:
        try:
            if self.storage is None:
                raise RuntimeError("Blob storage is not configured")
            if not path_or_url:
                raise ValueError("Invalid file path")
            self.storage.delete(path_or_url)
            return ActionResult.ok(path_or_url)
        except Exception as e:
            logger.exception(f"[{self.tag}] Failed to delete file '{path_or_url}': {e}")
            return ActionResult.fail(self._error_message(e, "Failed to delete file"))
