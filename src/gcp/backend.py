import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, storage as firebase_storage
from fastapi import Request

from logger import logger
from config.config import settings
from account.stytch_manager import StytchManager
from gcp.db import FirestoreStore
from gcp.secret import resolve_secret
from gcp.storage import StorageManager
from property.property_manager import PropertyManager
from lead.lead_manager import LeadManager
from banner.banner_manager import BannerManager
from heading.heading_manager import HeadingManager
from blog.blog_manager import BlogManager
from green.green_manager import GreenManager
from metrics.metrics_manager import MetricsManager


class Backend():
    """
    Handles to the managed services, built once at startup and handed to
    route handlers through ``get_backend``.
    """

    def __init__(self, store: FirestoreStore, storage: Optional[StorageManager], auth: StytchManager):
        self.store = store
        self.storage = storage
        self.auth = auth

        self.properties = PropertyManager(store, storage)
        self.leads = LeadManager(store)
        self.banners = BannerManager(store, storage)
        self.headings = HeadingManager(store)
        self.blog = BlogManager(store, storage)
        self.green = GreenManager(store, storage)
        self.metrics = MetricsManager(store)


def _firebase_app() -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        key_file_path = settings.GCP.SERVICE_ACCOUNT_KEY_FILE
        cred = credentials.Certificate(key_file_path) \
            if key_file_path and os.path.exists(key_file_path) \
            else credentials.ApplicationDefault()
        logger.info("[BACKEND] Initializing Firebase Admin...")
        return firebase_admin.initialize_app(cred, {
            'projectId': settings.GCP.PROJECT_ID,
            'storageBucket': settings.GCP.Storage.BUCKET,
        })


def build_backend() -> Backend:
    logger.info(f"[BACKEND] Connecting to project {settings.GCP.PROJECT_ID}")
    app = _firebase_app()
    store = FirestoreStore(
        project_id=settings.GCP.PROJECT_ID,
        database=settings.GCP.Firestore.DB,
        key_file_path=settings.GCP.SERVICE_ACCOUNT_KEY_FILE
    )
    storage = StorageManager(firebase_storage.bucket(app=app))
    auth = StytchManager(
        project_id=settings.Authentication.STYTCH_PROJECT_ID,
        secret=resolve_secret(settings.Secret.STYTCH_SECRET_KEY)
    )
    return Backend(store=store, storage=storage, auth=auth)


def get_backend(request: Request) -> Backend:
    return request.app.state.backend
