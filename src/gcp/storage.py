import time
import uuid
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse, unquote

from google.cloud.storage import Bucket

from logger import logger
from config.config import settings
from gcp.storage_model import CloudPath, UploadedFile

DOWNLOAD_TOKEN_METADATA_KEY = 'firebaseStorageDownloadTokens'

def current_millis() -> int:
    return int(time.time() * 1000)

class StorageManager():
    """
    Blob storage for uploaded media.

    Objects are written with a Firebase download token so the returned URL
    stays valid for as long as the object exists.
    """

    def __init__(self, bucket: Bucket):
        self.bucket = bucket

    def upload(self, path: str, file: UploadedFile) -> str:
        token = str(uuid.uuid4())
        blob = self.bucket.blob(path)
        blob.metadata = {DOWNLOAD_TOKEN_METADATA_KEY: token}
        blob.upload_from_string(file.content, content_type=file.content_type)
        logger.info(f"[STORAGE] Uploaded {len(file.content)} bytes to gs://{self.bucket.name}/{path}")
        return CloudPath(bucket_id=self.bucket.name, path=PurePosixPath(path)).download_url(
            base_url=settings.GCP.Storage.DOWNLOAD_URL_BASE,
            token=token
        )

    def delete(self, path_or_url: str):
        object_name = self.object_name(path_or_url)
        self.bucket.blob(object_name).delete()
        logger.info(f"[STORAGE] Deleted gs://{self.bucket.name}/{object_name}")

    @staticmethod
    def object_name(path_or_url: str) -> str:
        """Accepts an object path, a gs:// URL or a download URL."""
        if path_or_url.startswith('gs://'):
            return str(CloudPath.from_path(path_or_url).path)
        parsed = urlparse(path_or_url)
        if parsed.scheme in ('http', 'https'):
            marker = '/o/'
            if marker not in parsed.path:
                raise ValueError(f"Not a storage download URL: {path_or_url}")
            return unquote(parsed.path.split(marker, 1)[1])
        return path_or_url.lstrip('/')

    # Path conventions

    @staticmethod
    def property_media_path(property_id: str, filename: str, millis: Optional[int] = None) -> str:
        return f"{settings.GCP.Storage.PROPERTIES_FOLDER}/{property_id}/{millis or current_millis()}_{filename}"

    @staticmethod
    def blog_image_path(blog_id: Optional[str], filename: str, millis: Optional[int] = None) -> str:
        folder = blog_id or settings.GCP.Storage.TEMP_FOLDER
        return f"{settings.GCP.Storage.BLOG_FOLDER}/{folder}/{millis or current_millis()}_{filename}"

    @staticmethod
    def banner_image_path(banner_id: str, filename: str) -> str:
        return f"{settings.GCP.Storage.BANNERS_FOLDER}/{banner_id}/{filename}"

    @staticmethod
    def green_photo_path(filename: str, millis: Optional[int] = None) -> str:
        return f"{settings.GCP.Storage.GREEN_FOLDER}/{millis or current_millis()}_{filename}"
