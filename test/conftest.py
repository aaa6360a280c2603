"""
Fixtures pytest partagées : environnement de test, faux client du modèle, client HTTP.
"""

import base64
import json
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Avant tout import de l'application : pas de vraie clé ni de vrai bucket
os.environ["APP_API_KEY"] = "test-api-key"
os.environ["MISTRAL_API_KEY"] = "test-mistral-key"
os.environ["LOG_LEVEL"] = "WARNING"

from app.core.config import get_settings  # noqa: E402

API_KEY = "test-api-key"


def llm_response(content):
    """Réponse chat completion minimale telle que renvoyée par le SDK."""
    if not isinstance(content, str) and content is not None:
        content = json.dumps(content)
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def make_llm_client(content=None, *, side_effect=None):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=llm_response(content),
        side_effect=side_effect,
    )
    return client


@pytest.fixture
def bucket_dir(tmp_path, monkeypatch):
    """Bucket temporaire ; les settings sont rechargés pour le test."""
    bucket = tmp_path / "bills"
    monkeypatch.setenv("CC_FS_BUCKET", str(bucket))
    monkeypatch.delenv("APP_HOME", raising=False)
    get_settings.cache_clear()
    yield bucket
    get_settings.cache_clear()


@pytest.fixture
def settings(bucket_dir):
    return get_settings()


@pytest.fixture
def sample_image_bytes():
    """JPEG minimal : SOI + en-tête JFIF + EOI."""
    return b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"


@pytest.fixture
def sample_image_base64(sample_image_bytes):
    return base64.b64encode(sample_image_bytes).decode("ascii")


@pytest.fixture
def llm_client():
    """Faux client du modèle injecté à la place d'AsyncOpenAI ; configurer create.return_value."""
    client = make_llm_client({"articles": []})
    with patch("app.services.llm_client.get_llm_client", return_value=client):
        yield client


@pytest.fixture
def client(bucket_dir):
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
