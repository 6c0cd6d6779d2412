import os
from typing import Any, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2 import service_account

from logger import logger

CREATED_AT_KEY = 'createdAt'
UPDATED_AT_KEY = 'updatedAt'

class DocumentNotFoundError(LookupError):
    pass

class FirestoreStore():
    """
    Thin wrapper over a Firestore client.

    Documents come back as plain dicts with the store-assigned ``id`` merged
    in. Timestamps are written with the server sentinel, never the local
    clock.
    """

    def __init__(self, project_id: str, database: str, key_file_path: Optional[str] = None, client: firestore.Client = None):
        if client is not None:
            self.db_client = client
            return

        logger.info(f"[GCP_DB] Service account file exists: {bool(key_file_path) and os.path.exists(key_file_path)}")
        try:
            cred = service_account.Credentials.from_service_account_file(key_file_path) \
                if key_file_path and os.path.exists(key_file_path) \
                else None

            logger.info(f"[GCP_DB] Using credentials: {'service account file' if cred else 'default credentials'}")
            logger.info(f"[GCP_DB] Creating Firestore client for project: {project_id}, database: {database}")
            self.db_client = firestore.Client(project=project_id, database=database, credentials=cred)
            logger.info("[GCP_DB] Firestore client created successfully")
        except Exception as e:
            logger.exception(f"[GCP_DB] Failed to connect to Firestore DB for project {project_id}")
            raise e

    @staticmethod
    def _to_dict(snapshot) -> dict:
        return {'id': snapshot.id, **(snapshot.to_dict() or {})}

    def add(self, collection: str, data: dict) -> str:
        payload = {
            **data,
            CREATED_AT_KEY: firestore.SERVER_TIMESTAMP,
            UPDATED_AT_KEY: firestore.SERVER_TIMESTAMP,
        }
        payload.pop('id', None)
        _, doc_ref = self.db_client.collection(collection).add(payload)
        logger.debug(f"[GCP_DB] Added document {collection}/{doc_ref.id}")
        return doc_ref.id

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        snapshot = self.db_client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return self._to_dict(snapshot)

    def stream(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> list[dict]:
        query = self.db_client.collection(collection)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        return [self._to_dict(snapshot) for snapshot in query.stream()]

    def find(self, collection: str, field: str, value: Any) -> list[dict]:
        query = self.db_client.collection(collection).where(filter=FieldFilter(field, '==', value))
        return [self._to_dict(snapshot) for snapshot in query.stream()]

    def update(self, collection: str, doc_id: str, data: dict):
        payload = {**data, UPDATED_AT_KEY: firestore.SERVER_TIMESTAMP}
        payload.pop('id', None)
        payload.pop(CREATED_AT_KEY, None)
        # update() fails with NotFound when the document is missing
        self.db_client.collection(collection).document(doc_id).update(payload)
        logger.debug(f"[GCP_DB] Updated document {collection}/{doc_id} fields: {list(payload.keys())}")

    def delete(self, collection: str, doc_id: str):
        self.db_client.collection(collection).document(doc_id).delete()
        logger.debug(f"[GCP_DB] Deleted document {collection}/{doc_id}")

    def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> int:
        doc_ref = self.db_client.collection(collection).document(doc_id)
        doc_ref.set({field: firestore.Increment(amount), UPDATED_AT_KEY: firestore.SERVER_TIMESTAMP}, merge=True)
        return (doc_ref.get().to_dict() or {}).get(field, 0)
