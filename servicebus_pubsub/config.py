"""
Configuration management for the Service Bus publish/subscribe sample.
"""

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when credentials or settings cannot be loaded."""


class AzureConfig(BaseSettings):
    """Azure-specific configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", populate_by_name=True, extra="ignore"
    )

    subscription_id: Optional[str] = Field(None, validation_alias="AZURE_SUBSCRIPTION_ID")
    tenant_id: Optional[str] = Field(None, validation_alias="AZURE_TENANT_ID")
    client_id: Optional[str] = Field(None, validation_alias="AZURE_CLIENT_ID")
    client_secret: Optional[str] = Field(None, validation_alias="AZURE_CLIENT_SECRET")

    auth_location: Optional[str] = Field(None, validation_alias="AZURE_AUTH_LOCATION")

    @property
    def has_service_principal(self) -> bool:
        return bool(self.tenant_id and self.client_id and self.client_secret)


class SampleConfig(BaseSettings):
    """Settings for the resources the sample creates."""

    model_config = SettingsConfigDict(
        env_prefix="SAMPLE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    location: str = "westus"
    sku: str = "Standard"

    topic_size_mb: int = 2048
    updated_topic_size_mb: int = 3072
    subscription_idle_minutes: int = 10

    resource_group_prefix: str = "rgSB02_"
    resource_group_name_length: int = 24
    namespace_prefix: str = "namespace"
    namespace_name_length: int = 20
    topic_prefix: str = "topic_"
    topic_name_length: int = 24
    first_subscription_prefix: str = "sub1_"
    second_subscription_prefix: str = "sub2_"
    subscription_name_length: int = 24

    wait_for_teardown: bool = True


class MonitoringConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", populate_by_name=True, extra="ignore"
    )

    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")


class Config(BaseSettings):
    """Main configuration class that combines all settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    azure: AzureConfig = Field(default_factory=AzureConfig)
    sample: SampleConfig = Field(default_factory=SampleConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)


def load_auth_file(path: Union[str, Path]) -> AzureConfig:
    """
    Load service principal credentials from an Azure auth file.

    The file is the JSON document produced by
    ``az ad sp create-for-rbac --sdk-auth``.

    Args:
        path: Location of the auth file

    Returns:
        AzureConfig: Settings populated from the file
    """
    auth_path = Path(path)
    if not auth_path.is_file():
        raise ConfigurationError(f"Auth file not found: {auth_path}")

    try:
        data = json.loads(auth_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Auth file {auth_path} is not valid JSON: {e}") from e

    missing = [key for key in ("clientId", "clientSecret", "tenantId", "subscriptionId") if not data.get(key)]
    if missing:
        raise ConfigurationError(f"Auth file {auth_path} is missing: {', '.join(missing)}")

    return AzureConfig(
        subscription_id=data["subscriptionId"],
        tenant_id=data["tenantId"],
        client_id=data["clientId"],
        client_secret=data["clientSecret"],
        auth_location=str(auth_path),
    )


def resolve_azure_config(azure: AzureConfig) -> AzureConfig:
    """Prefer the auth file when one is configured, else the environment settings."""
    if azure.auth_location:
        return load_auth_file(azure.auth_location)
    if not azure.subscription_id:
        raise ConfigurationError(
            "No subscription configured. Set AZURE_SUBSCRIPTION_ID or AZURE_AUTH_LOCATION."
        )
    return azure


# Global configuration instance
config = Config()
