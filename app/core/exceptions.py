"""
Hiérarchie d'exceptions de la passerelle.

Chaque exception porte le code HTTP et le message renvoyés au client.
Les handlers enregistrés dans main.py les convertissent en {"error": ..., "details": ...}.
Aucune n'est retentée : elles terminent la requête.
"""

from typing import Any, Optional

from app.models.constants import (
    FORBIDDEN_MESSAGE,
    MISSING_SCAN_MESSAGE,
    PAYLOAD_TOO_LARGE_MESSAGE,
    UNREADABLE_SCAN_MESSAGE,
)


class ReceiptOCRError(Exception):
    """Erreur de base ; status_code et details sont exposés dans la réponse."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_content(self) -> dict[str, Any]:
        content: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            content["details"] = self.details
        return content


class MissingInputError(ReceiptOCRError):
    status_code = 400

    def __init__(self, message: str = MISSING_SCAN_MESSAGE):
        super().__init__(message)


class UnauthorizedError(ReceiptOCRError):
    status_code = 403

    def __init__(self, message: str = FORBIDDEN_MESSAGE):
        super().__init__(message)


class UnreadableReceiptError(ReceiptOCRError):
    """Le modèle a signalé un scan flou, illisible ou qui n'est pas un ticket."""

    status_code = 400

    def __init__(self, message: str = UNREADABLE_SCAN_MESSAGE):
        super().__init__(message)


class PayloadTooLargeError(ReceiptOCRError):
    status_code = 413

    def __init__(self, message: str = PAYLOAD_TOO_LARGE_MESSAGE, *, details: Any = None):
        super().__init__(message, details=details)


class UpstreamError(ReceiptOCRError):
    """
    Échec de l'API du modèle (réseau ou réponse d'erreur).
    Reprend le code HTTP de la réponse amont s'il existe, sinon 500.
    """


class InternalError(ReceiptOCRError):
    """Réponse du modèle inexploitable (JSON invalide, schéma inattendu) ou erreur imprévue."""
