"""
Constantes partagées : messages localisés renvoyés au client et sentinelle du modèle.
"""

CANNOT_READ = "cannot_read"
"""Valeur du champ 'error' renvoyée par le modèle quand le scan est inexploitable."""

MISSING_SCAN_MESSAGE = (
    "Scan manquant. Veuillez scanner un document avant d'en extraire des informations."
)
UNREADABLE_SCAN_MESSAGE = (
    "Le scan est flou, illisible ou n'a pas été identifié comme un ticket de caisse. "
    "Veuillez essayer avec un autre scan."
)
INVALID_BODY_MESSAGE = "Corps de requête invalide. Un objet JSON contenant base64_image est attendu."
PAYLOAD_TOO_LARGE_MESSAGE = "Scan trop volumineux."
FORBIDDEN_MESSAGE = "Forbidden"
