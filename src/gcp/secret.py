import os
from typing import Optional

from google.cloud import secretmanager
from google.oauth2 import service_account
from google.api_core.exceptions import NotFound

from config.config import settings
from logger import logger

class SecretManager():

    def __init__(self, project_id: str, key_file_path: Optional[str] = None):
        logger.info("[SECRET_MANAGER] Initializing Google Cloud Secret Manager...")
        cred = service_account.Credentials.from_service_account_file(key_file_path) \
            if key_file_path and os.path.exists(key_file_path) \
            else None

        self.project_id = project_id
        self.client = secretmanager.SecretManagerServiceClient(credentials=cred)
        logger.info("[SECRET_MANAGER] Google Cloud Secret Manager initialized successfully")

    def secret(self, secret_id, version_id="latest") -> Optional[str]:
        """
        Accesses the payload of the specified secret version.

        Args:
            secret_id (str): The ID of the secret.
            version_id (str): The version of the secret (default: "latest").

        Returns:
            str: The secret payload as a string.
        """
        name = f"projects/{self.project_id}/secrets/{secret_id}/versions/{version_id}"

        try:
            response = self.client.access_secret_version(request={"name": name})
            return response.payload.data.decode("UTF-8")
        except NotFound:
            logger.error(f"Secret {secret_id} with version {version_id} not found.")
            return None
        except Exception as e:
            logger.error(f"An error occurred: {e}")
            return None


def resolve_secret(secret_id: str) -> Optional[str]:
    """
    Reads a secret from Secret Manager when enabled, else from the environment.
    """
    if settings.FeatureFlags.ENABLE_SECRET_MANAGER:
        value = SecretManager(
            project_id=settings.GCP.PROJECT_ID,
            key_file_path=settings.GCP.SERVICE_ACCOUNT_KEY_FILE
        ).secret(secret_id)
        if value:
            return value
        logger.warning(f"[SECRET_MANAGER] Falling back to environment variable for: {secret_id}")

    env_value = os.getenv(secret_id)
    if env_value is None:
        logger.warning(f"[SECRET_MANAGER] No environment variable found for: {secret_id}")
    return env_value
