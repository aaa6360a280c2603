"""
Orchestration du pipeline d'extraction : appel LLM puis validation de sa réponse.
Un seul appel au modèle ; toute erreur termine la requête (pas de fallback ni de retry).
La sauvegarde du scan n'a pas lieu ici : elle est planifiée par la route après succès.
"""

import logging
from typing import Optional

from openai import AsyncOpenAI

from app.core.config import Settings, get_settings
from app.core.exceptions import UnreadableReceiptError
from app.models.schemas import TicketArticles
from app.models.validation import validate_ticket_result
from app.services.llm_client import request_ticket_json

logger = logging.getLogger(__name__)


async def run_ticket_pipeline(
    image_base64: str,
    *,
    settings: Optional[Settings] = None,
    client: Optional[AsyncOpenAI] = None,
) -> TicketArticles:
    """
    Extrait les articles d'un scan de ticket de caisse.
    Lève UnreadableReceiptError si le modèle n'a pas pu lire le scan.
    """
    settings = settings or get_settings()

    data = await request_ticket_json(image_base64, settings=settings, client=client)
    try:
        result = validate_ticket_result(data)
    except UnreadableReceiptError:
        logger.info("Le modèle %s a renvoyé cannot_read", settings.llm_model)
        raise

    logger.info("Extraction réussie avec %s: %d article(s)", settings.llm_model, len(result.articles))
    return result
