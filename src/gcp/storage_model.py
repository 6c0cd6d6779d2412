from pydantic import BaseModel, field_serializer
from pathlib import PurePosixPath
from urllib.parse import urlparse, quote

class CloudPath(BaseModel):
        bucket_id: str
        path: PurePosixPath

        def full_path(self)->str:
            return f'gs://{self.bucket_id}/{self.path}'

        def download_url(self, base_url: str, token: str)->str:
            """Firebase-style public download URL for the object."""
            object_name = quote(str(self.path), safe='')
            return f'{base_url}/{self.bucket_id}/o/{object_name}?alt=media&token={token}'

        @staticmethod
        def from_path(path:str)->'CloudPath':
            parsed_url = urlparse(path)
            if parsed_url.scheme != 'gs':
                raise ValueError("Invalid GCS path. It should start with 'gs://'")

            bucket_id = parsed_url.netloc
            prefix = parsed_url.path.lstrip('/')

            return CloudPath(bucket_id=bucket_id, path=PurePosixPath(prefix))

        @field_serializer('path')
        def serialize_path(self, path: PurePosixPath) -> str:
            return str(path)


class UploadedFile(BaseModel):
    """A file received from a form post, ready to be written to storage."""
    filename: str
    content: bytes
    content_type: str = 'application/octet-stream'

    @property
    def is_empty(self) -> bool:
        return not self.filename or not self.content
