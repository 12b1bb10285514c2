# coding: utf-8

"""
Settings from the environment and region handling.
"""

import pytest

from face_quickstart import config
from face_quickstart.config import AzureRegion, DEFAULT_REGION, Settings, image_name_from_url, load_settings
from face_quickstart.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("FACE_SUBSCRIPTION_KEY", raising=False)
    monkeypatch.delenv("AZURE_FACE_API_ENDPOINT", raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: False)


def test_key_from_environment(monkeypatch):
    monkeypatch.setenv("FACE_SUBSCRIPTION_KEY", " abc123 ")

    settings = load_settings()

    assert settings.subscription_key == "abc123"
    assert settings.region == DEFAULT_REGION == AzureRegion.WESTUS
    assert settings.endpoint == "https://westus.api.cognitive.microsoft.com/"


def test_missing_key_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="FACE_SUBSCRIPTION_KEY"):
        load_settings()


def test_region_override(monkeypatch):
    monkeypatch.setenv("FACE_SUBSCRIPTION_KEY", "abc123")

    settings = load_settings(region="WestEurope")

    assert settings.region == AzureRegion.WESTEUROPE
    assert settings.endpoint == "https://westeurope.api.cognitive.microsoft.com/"


def test_unknown_region_is_rejected(monkeypatch):
    monkeypatch.setenv("FACE_SUBSCRIPTION_KEY", "abc123")

    with pytest.raises(ConfigurationError, match="moon-1"):
        load_settings(region="moon-1")


def test_endpoint_environment_overrides_region(monkeypatch):
    monkeypatch.setenv("FACE_SUBSCRIPTION_KEY", "abc123")
    monkeypatch.setenv("AZURE_FACE_API_ENDPOINT", "https://my-face.cognitiveservices.azure.com/")

    settings = load_settings(region="eastus")

    assert settings.endpoint == "https://my-face.cognitiveservices.azure.com/"


def test_non_positive_timeout_is_rejected(monkeypatch):
    monkeypatch.setenv("FACE_SUBSCRIPTION_KEY", "abc123")

    with pytest.raises(ConfigurationError):
        load_settings(training_timeout=0)


def test_repr_hides_key():
    settings = Settings(subscription_key="super-secret")

    assert "super-secret" not in repr(settings)


def test_image_name_from_url():
    assert image_name_from_url(config.IMAGE_BASE_URL + "Family1-Dad1.jpg") == "Family1-Dad1.jpg"


def test_family_sample_has_two_images_per_person():
    assert len(config.FAMILY_IMAGES) == 6
    assert all(len(images) == 2 for images in config.FAMILY_IMAGES.values())
