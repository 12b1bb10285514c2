# coding: utf-8

"""
Quickstart Configuration

Service region, credentials and the sample data the quickstart runs against.
The subscription key comes from the environment (a local .env file is loaded
first); everything else has a hardcoded default that the CLI can override.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

SUBSCRIPTION_KEY_ENV = "FACE_SUBSCRIPTION_KEY"
ENDPOINT_ENV = "AZURE_FACE_API_ENDPOINT"


class AzureRegion(str, Enum):
    """Regions the Face service is offered in"""
    WESTUS = "westus"
    WESTEUROPE = "westeurope"
    SOUTHEASTASIA = "southeastasia"
    EASTUS2 = "eastus2"
    WESTCENTRALUS = "westcentralus"
    WESTUS2 = "westus2"
    EASTUS = "eastus"
    SOUTHCENTRALUS = "southcentralus"
    NORTHEUROPE = "northeurope"
    EASTASIA = "eastasia"
    AUSTRALIAEAST = "australiaeast"
    BRAZILSOUTH = "brazilsouth"
    CANADACENTRAL = "canadacentral"
    CENTRALINDIA = "centralindia"
    UKSOUTH = "uksouth"
    JAPANEAST = "japaneast"
    CENTRALUS = "centralus"
    FRANCECENTRAL = "francecentral"
    KOREACENTRAL = "koreacentral"
    JAPANWEST = "japanwest"
    NORTHCENTRALUS = "northcentralus"

    @property
    def endpoint(self) -> str:
        return f"https://{self.value}.api.cognitive.microsoft.com/"

    @classmethod
    def parse(cls, value: str) -> "AzureRegion":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unknown Face service region: {value!r}") from None


# Replace with the region of your Face subscription
DEFAULT_REGION = AzureRegion.WESTUS

# Detect / find similar: one image with a single face, one group image that
# contains a face similar to it
SINGLE_FACE_URL = "https://www.biography.com/.image/t_share/MTQ1MzAyNzYzOTgxNTE0NTEz/john-f-kennedy---mini-biography.jpg"
GROUP_FACES_URL = "http://www.historyplace.com/kennedy/president-family-portrait-closeup.jpg"

# Identify: training images per person and a group photo to identify
IMAGE_BASE_URL = "https://csdx.blob.core.windows.net/resources/Face/Images/"
DEFAULT_GROUP_ID = "my-families"
IDENTIFICATION_IMAGE = "identification1.jpg"
FAMILY_IMAGES: Dict[str, List[str]] = {
    "Family1-Dad": ["Family1-Dad1.jpg", "Family1-Dad2.jpg"],
    "Family1-Mom": ["Family1-Mom1.jpg", "Family1-Mom2.jpg"],
    "Family1-Son": ["Family1-Son1.jpg", "Family1-Son2.jpg"],
    "Family1-Daughter": ["Family1-Daughter1.jpg", "Family1-Daughter2.jpg"],
    "Family2-Lady": ["Family2-Lady1.jpg", "Family2-Lady2.jpg"],
    "Family2-Man": ["Family2-Man1.jpg", "Family2-Man2.jpg"],
}


@dataclass
class Settings:
    """Runtime settings for one quickstart run"""
    subscription_key: str
    region: AzureRegion = DEFAULT_REGION
    endpoint_override: Optional[str] = None
    group_id: str = DEFAULT_GROUP_ID
    training_timeout: float = 300.0
    poll_interval: float = 1.0
    poll_backoff: float = 2.0
    max_poll_interval: float = 10.0

    @property
    def endpoint(self) -> str:
        return self.endpoint_override or self.region.endpoint

    def __repr__(self) -> str:
        # Never print the key
        return (f"Settings(region='{self.region.value}', endpoint='{self.endpoint}', "
                f"group_id='{self.group_id}', training_timeout={self.training_timeout})")


def load_settings(region: Optional[str] = None, dotenv_path: Optional[str] = None, **overrides) -> Settings:
    """
    Build settings from the environment

    Args:
        region: Region name overriding DEFAULT_REGION
        dotenv_path: Explicit .env file; the default search is used when None
        **overrides: Any other Settings field

    Raises:
        ConfigurationError: subscription key missing or region unknown
    """
    load_dotenv(dotenv_path)

    key = os.getenv(SUBSCRIPTION_KEY_ENV, "").strip()
    if not key:
        raise ConfigurationError(
            f"Set the {SUBSCRIPTION_KEY_ENV} environment variable to your Face subscription key"
        )

    settings = Settings(
        subscription_key=key,
        region=AzureRegion.parse(region) if region else DEFAULT_REGION,
        endpoint_override=os.getenv(ENDPOINT_ENV) or None,
        **overrides
    )
    if settings.training_timeout <= 0 or settings.poll_interval <= 0:
        raise ConfigurationError("Training timeout and poll interval must be positive")
    return settings


def image_name_from_url(url: str) -> str:
    """Last path segment of an image URL, used as its display name"""
    return url[url.rfind("/") + 1:]
