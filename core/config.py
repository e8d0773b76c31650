"""
Application Configuration
Add constants, secrets, env variables here
"""

from functools import lru_cache
import os
import json
from pathlib import Path
from pydantic import BaseModel, ConfigDict, computed_field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

# Load .env file into os.environ so os.getenv() works correctly
# This must happen before Settings class is instantiated
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_secret(secret_name: str, region_name: str) -> dict:
    """
    Retrieve secrets from AWS Secrets Manager

    Args:
        secret_name: Name of the secret in Secrets Manager
        region_name: AWS region where secret is stored

    Returns:
        dict: Parsed secret value

    Raises:
        ClientError: If secret cannot be retrieved
    """
    session = boto3.session.Session()
    client = session.client(
        service_name='secretsmanager',
        region_name=region_name
    )
    try:
        get_secret_value_response = client.get_secret_value(
            SecretId=secret_name
        )
    except ClientError:
        raise
    secret = get_secret_value_response['SecretString']
    return json.loads(
        secret.replace('\n', '')
    )


class StorageConfig(BaseModel):
    """
    Read-only storage configuration shared by the request handlers
    and the storage gateway
    """

    max_file_size_allowed: int = 5242880
    supported_types: frozenset[str] = frozenset({"application/pdf"})
    container_name: str = "files"
    endpoint_url: str | None = None
    region_name: str | None = None
    timeout_seconds: float = 30.0

    model_config = ConfigDict(frozen=True)


# Define settings class for univeral access
class Settings(BaseSettings):
    # Computed or constant values
    client_origin: str | None = os.getenv("client_origin")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Cache for AWS Secrets Manager to avoid multiple API calls
    # Note: Must use PrivateAttr for Pydantic v2 private attributes
    _secret_cache: dict | None = PrivateAttr(default=None)

    def _get_config_value(
        self,
        env_var_name: str,
        secret_key_name: str | None = None,
        default: str | None = None
    ) -> str | None:
        """
        Get configuration value from environment variable or AWS Secrets Manager (with caching).

        Args:
            env_var_name: Environment variable name to check first
            secret_key_name: Key name in AWS Secrets (defaults to env_var_name if not provided)
            default: Default value to return if not found in env or secrets

        Returns:
            Configuration value, or default value if not found
        """
        # 1. Check environment variable first
        env_value = os.getenv(env_var_name)
        if env_value:
            return env_value

        # 2. Try to get from AWS Secrets Manager with caching
        if secret_key_name is None:
            secret_key_name = env_var_name

        env_secret = os.getenv('ENV_SECRETS')
        if env_secret:
            try:
                if self._secret_cache is None:
                    self._secret_cache = get_secret(env_secret, self.AWS_REGION or 'us-east-1')

                secret_value = self._secret_cache.get(secret_key_name)
                if secret_value is not None:
                    return secret_value
            except (ClientError, BotoCoreError):
                pass

        # 3. Return default value if provided
        return default

    # AWS Credentials
    AWS_REGION: str | None = os.getenv("AWS_REGION")

    @computed_field
    @property
    def AWS_ACCESS_KEY_ID(self) -> str | None:
        """Get AWS access key from env or secrets"""
        return self._get_config_value("AWS_ACCESS_KEY_ID")

    @computed_field
    @property
    def AWS_SECRET_ACCESS_KEY(self) -> str | None:
        """Get AWS secret key from env or secrets"""
        return self._get_config_value("AWS_SECRET_ACCESS_KEY")

    # Object storage
    # STORAGE_ENDPOINT_URL points at any S3 compatible service (MinIO, LocalStack);
    # leave unset for AWS S3
    STORAGE_ENDPOINT_URL: str | None = None
    STORAGE_CONTAINER_NAME: str = "files"
    STORAGE_TIMEOUT_SECONDS: float = 30.0

    # Upload validation
    MAX_FILE_SIZE_ALLOWED: int = 5242880
    SUPPORTED_TYPES: list[str] = ["application/pdf"]

    # Read environment variables from .env file, if it exists
    # extra='ignore' prevents validation errors from extra env vars
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def storage_config(self) -> StorageConfig:
        """Build the immutable storage config from these settings"""
        return StorageConfig(
            max_file_size_allowed=self.MAX_FILE_SIZE_ALLOWED,
            supported_types=frozenset(self.SUPPORTED_TYPES),
            container_name=self.STORAGE_CONTAINER_NAME,
            endpoint_url=self.STORAGE_ENDPOINT_URL,
            region_name=self.AWS_REGION,
            timeout_seconds=self.STORAGE_TIMEOUT_SECONDS,
        )


# Export settings
@lru_cache
def get_settings() -> Settings:
    """
    Get settings instance, cached for performance
    """
    return Settings()


@lru_cache
def get_storage_config() -> StorageConfig:
    """
    Get the storage config, loaded once for the process lifetime
    """
    return get_settings().storage_config()


if __name__ == "__main__":
    # To use in other modules
    # from core.config import get_settings
    print(get_settings().storage_config())
