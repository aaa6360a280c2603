"""
Instructions envoyées au modèle et construction des messages chat.

Deux variantes de prompt sont supportées (PROMPT_MODE) :
- system_user : consigne détaillée en message système, rappel + image en message utilisateur ;
- user_only   : un seul message utilisateur portant la consigne complète et l'image.
Le format de réponse JSON imposé à l'API est configurable séparément (RESPONSE_FORMAT).
"""

from typing import Any, Optional

from app.services.normalization import strip_data_uri

SYSTEM_INSTRUCTION = (
    "Extraies la listes des articles et leur prix unitaire depuis des scan de ticket de caisse. "
    "Si tu vois deux fois le même article sur une même ligne avec un prix total et non un prix "
    "unitaire, je veux que tu les sépares en deux lignes. Je veux que tu me renvoies un JSON avec "
    "une liste d'objets contenant le nom de l'article et son prix unitaire. Le format du JSON : "
    "{'articles': [{'nomArticle': nom_article, 'prixUnitaire': prix_unitaire}]}. Si l'image est "
    "floue, illisible ou que ce n'est pas un ticket de caisse, je veux que tu me renvoies l'objet "
    "JSON suivant : { 'error': 'cannot_read' }. La réponse doit être un objet JSON et rien d'autre. "
    "Sans texte préalable, sans formatage, sans retour à la ligne, sans retour chariot de type '\\n' "
    "juste le JSON brut sans rien d'autre."
)

USER_INSTRUCTION = (
    "Extraies les information de ce scan de ticket de caisses et veille bien à respecter le format "
    "JSON demandé. Si l'image est floue, illisible ou que ce n'est pas un ticket de caisse, renvoie "
    "l'objet JSON suivant : { 'error': 'cannot_read' }."
)


def image_data_uri(image_base64: str) -> str:
    return f"data:image/jpeg;base64,{strip_data_uri(image_base64)}"


def build_messages(image_base64: str, mode: str = "system_user") -> list[dict[str, Any]]:
    """
    Construit la liste de messages chat pour l'extraction.

    Args:
        image_base64: Scan encodé en base64 (un préfixe data URI est toléré).
        mode: "system_user" ou "user_only".
    """
    image_part = {"type": "image_url", "image_url": {"url": image_data_uri(image_base64)}}

    if mode == "system_user":
        return [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {
                "role": "user",
                "content": [{"type": "text", "text": USER_INSTRUCTION}, image_part],
            },
        ]
    if mode == "user_only":
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": f"{SYSTEM_INSTRUCTION} {USER_INSTRUCTION}"},
                    image_part,
                ],
            },
        ]
    raise ValueError(f"Mode de prompt inconnu: {mode}")


def build_response_format(mode: str = "json_object") -> Optional[dict[str, str]]:
    """Format de réponse imposé à l'API, ou None pour s'en remettre à la consigne seule."""
    if mode == "json_object":
        return {"type": "json_object"}
    return None
