"""
Schémas Pydantic pour les entrées/sorties de l'API et la réponse structurée du LLM.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from app.services.normalization import string_to_float


class TicketRequest(BaseModel):
    """Corps de POST /api/ticket-mistral-ocr."""

    # Optionnel dans le schéma : l'absence est traitée par la route (400 localisé, pas 422)
    base64_image: Optional[str] = Field(None, description="Scan JPEG encodé en base64")


class LigneArticle(BaseModel):
    """Un article du ticket de caisse et son prix unitaire."""

    nomArticle: str = Field(..., description="Libellé de l'article")
    prixUnitaire: float = Field(..., description="Prix unitaire de l'article")

    @field_validator("prixUnitaire", mode="before")
    @classmethod
    def parse_price(cls, value: Any) -> Any:
        """Accepte un prix en chaîne ("2,50 €") en plus d'un nombre ; une chaîne sans montant est rejetée."""
        if isinstance(value, str):
            return string_to_float(value)
        return value


class TicketArticles(BaseModel):
    """Résultat d'extraction renvoyé au client."""

    articles: list[LigneArticle] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Corps de toutes les réponses d'erreur."""

    error: str
    details: Optional[Any] = None
