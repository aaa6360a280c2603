"""
Validation de la réponse décodée du modèle.
"""

from typing import Any

from pydantic import ValidationError

from app.core.exceptions import InternalError, UnreadableReceiptError
from app.models.constants import CANNOT_READ
from app.models.schemas import TicketArticles


def validate_ticket_result(data: dict[str, Any]) -> TicketArticles:
    """
    Interprète la réponse du modèle.
    Lève UnreadableReceiptError sur la sentinelle {"error": "cannot_read"},
    InternalError si la réponse ne respecte pas le format {"articles": [...]}.
    """
    if data.get("error") == CANNOT_READ:
        raise UnreadableReceiptError()

    if "articles" not in data:
        raise InternalError("Réponse LLM invalide: champ 'articles' absent", details=data)

    try:
        return TicketArticles.model_validate(data)
    except ValidationError as e:
        raise InternalError(
            "Réponse LLM invalide: format des articles inattendu",
            details=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e
