import copy
import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from config.config import settings
from account.account_model import AdminSession
from account.stytch_manager import AuthenticationError
from gcp.backend import Backend, get_backend
from gcp.db import CREATED_AT_KEY, UPDATED_AT_KEY
from gcp.storage_model import UploadedFile

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse"
SESSION_TOKEN = "session-token-123"


class InMemoryStore():
    """Document store double with the same surface as ``FirestoreStore``."""

    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}
        self._ids = itertools.count(1)
        self._ticks = itertools.count()
        self.fail_on: set[str] = set()

    def _now(self) -> datetime:
        # strictly increasing so write order is observable
        return datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=next(self._ticks))

    def _check(self, operation: str):
        if operation in self.fail_on:
            raise RuntimeError(f"{operation} failed")

    def _collection(self, name: str) -> dict[str, dict]:
        return self.collections.setdefault(name, {})

    def seed(self, collection: str, document: dict, doc_id: Optional[str] = None, created_at: Optional[datetime] = None) -> str:
        doc_id = doc_id or f"doc-{next(self._ids)}"
        moment = created_at or self._now()
        self._collection(collection)[doc_id] = {**copy.deepcopy(document), CREATED_AT_KEY: moment, UPDATED_AT_KEY: moment}
        return doc_id

    def add(self, collection: str, data: dict) -> str:
        self._check('add')
        payload = {key: value for key, value in copy.deepcopy(data).items() if key != 'id'}
        return self.seed(collection, payload)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        self._check('get')
        document = self._collection(collection).get(doc_id)
        return {'id': doc_id, **copy.deepcopy(document)} if document is not None else None

    def stream(self, collection: str, order_by: Optional[str] = None, descending: bool = False) -> list[dict]:
        self._check('stream')
        documents = [{'id': doc_id, **copy.deepcopy(document)} for doc_id, document in self._collection(collection).items()]
        if order_by:
            documents = [document for document in documents if order_by in document]
            documents.sort(key=lambda document: document[order_by], reverse=descending)
        return documents

    def find(self, collection: str, field: str, value: Any) -> list[dict]:
        self._check('find')
        return [document for document in self.stream(collection) if document.get(field) == value]

    def update(self, collection: str, doc_id: str, data: dict):
        self._check('update')
        documents = self._collection(collection)
        if doc_id not in documents:
            raise LookupError(f"No document to update: {collection}/{doc_id}")
        payload = {key: value for key, value in copy.deepcopy(data).items() if key not in ('id', CREATED_AT_KEY)}
        documents[doc_id].update({**payload, UPDATED_AT_KEY: self._now()})

    def delete(self, collection: str, doc_id: str):
        self._check('delete')
        self._collection(collection).pop(doc_id, None)

    def increment(self, collection: str, doc_id: str, field: str, amount: int = 1) -> int:
        self._check('increment')
        document = self._collection(collection).setdefault(doc_id, {})
        document[field] = document.get(field, 0) + amount
        return document[field]


class InMemoryStorage():
    def __init__(self, bucket_name: str = "test-bucket"):
        self.name = bucket_name
        self.objects: dict[str, bytes] = {}
        self.fail = False

    def upload(self, path: str, file: UploadedFile) -> str:
        if self.fail:
            raise RuntimeError("Storage unavailable")
        self.objects[path] = file.content
        return f"https://storage.test/{self.name}/{path}"

    def delete(self, path_or_url: str):
        if self.fail:
            raise RuntimeError("Storage unavailable")
        self.objects.pop(path_or_url.split(f"/{self.name}/", 1)[-1], None)


class FakeAuth():
    def __init__(self):
        self.revoked: list[str] = []

    def sign_in(self, email: str, password: str) -> AdminSession:
        if email != ADMIN_EMAIL or password != ADMIN_PASSWORD:
            raise AuthenticationError("Invalid email or password")
        return AdminSession(user_id="user-test-1", email=email, session_token=SESSION_TOKEN)

    def authenticate(self, session_token: str) -> AdminSession:
        if session_token != SESSION_TOKEN or session_token in self.revoked:
            raise AuthenticationError("Session expired")
        return AdminSession(user_id="user-test-1", email=ADMIN_EMAIL, session_token=session_token)

    def revoke(self, session_token: str):
        self.revoked.append(session_token)


def image(name: str = "photo.jpg") -> UploadedFile:
    return UploadedFile(filename=name, content=b"\x89PNG fake", content_type="image/jpeg")


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def backend(store, storage):
    return Backend(store=store, storage=storage, auth=FakeAuth())


@pytest.fixture
def app(backend):
    from main import app as dashboard_app
    dashboard_app.state.backend = backend
    dashboard_app.dependency_overrides[get_backend] = lambda: backend
    yield dashboard_app
    dashboard_app.dependency_overrides.clear()
    dashboard_app.state.backend = None


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    client.cookies.set(settings.Authentication.SESSION_COOKIE_NAME, SESSION_TOKEN)
    return client
