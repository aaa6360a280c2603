"""
Client du modèle multimodal (API Mistral, compatible OpenAI) pour l'OCR des tickets de caisse.
Un seul appel par requête : pas de streaming, pas de retry, timeouts par défaut du SDK.
"""

import json
import logging
from typing import Any, Optional

import openai
from openai import AsyncOpenAI

from app.core.config import Settings, get_settings
from app.core.exceptions import InternalError, UpstreamError
from app.services.normalization import strip_json_fences
from app.services.prompts import build_messages, build_response_format

logger = logging.getLogger(__name__)


def get_llm_client(settings: Settings) -> AsyncOpenAI:
    """Client asynchrone pointé sur l'API du fournisseur du modèle, sans retry automatique."""
    return AsyncOpenAI(
        api_key=settings.mistral_api_key,
        base_url=settings.llm_base_url,
        max_retries=0,
    )


async def request_ticket_json(
    image_base64: str,
    *,
    settings: Optional[Settings] = None,
    client: Optional[AsyncOpenAI] = None,
) -> dict[str, Any]:
    """
    Envoie le scan au modèle et retourne sa réponse décodée en objet JSON.
    Lève UpstreamError si l'API échoue, InternalError si la réponse n'est pas un objet JSON.
    """
    settings = settings or get_settings()
    client = client or get_llm_client(settings)

    request: dict[str, Any] = {
        "model": settings.llm_model,
        "messages": build_messages(image_base64, settings.prompt_mode),
    }
    response_format = build_response_format(settings.response_format)
    if response_format is not None:
        request["response_format"] = response_format

    try:
        response = await client.chat.completions.create(**request)
    except openai.APIStatusError as e:
        logger.error("API %s en erreur (%s): %s", settings.llm_model, e.status_code, e.message)
        raise UpstreamError(e.message, status_code=e.status_code, details=e.body) from e
    except openai.APIError as e:
        logger.error("Appel API %s échoué: %s", settings.llm_model, e)
        raise UpstreamError(str(e), details=e.body) from e

    logger.info("Réponse du modèle %s reçue", settings.llm_model)

    if not response.choices or not response.choices[0].message.content:
        raise InternalError("Réponse LLM vide")

    raw = strip_json_fences(response.choices[0].message.content)
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Réponse LLM non JSON: %s", raw[:200])
        raise InternalError(f"Réponse LLM invalide: {e}") from e

    if not isinstance(data, dict):
        raise InternalError("Réponse LLM invalide: objet JSON attendu")
    return data
