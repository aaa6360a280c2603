"""
Fonctions utilitaires de normalisation des données échangées avec le modèle.
Nettoyage du base64 reçu, de la réponse texte du LLM et des prix avant conversion en nombres.
Le LLM fait l'essentiel via les instructions ; cette couche assure la cohérence post-extraction.
"""

import re

_DATA_URI_PREFIX = re.compile(r"^data:[\w.+/-]*;base64,", re.IGNORECASE)
_JSON_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def strip_data_uri(value: str) -> str:
    """Retire un éventuel préfixe 'data:image/...;base64,' pour ne garder que le base64."""
    return _DATA_URI_PREFIX.sub("", value.strip(), count=1)


def strip_json_fences(text: str) -> str:
    """
    Retire les balises Markdown ```json ... ``` qu'un modèle ajoute parfois
    malgré la consigne de renvoyer du JSON brut.
    """
    s = text.strip()
    match = _JSON_FENCE.match(s)
    return match.group(1) if match else s


def clean_amount_string(value: str) -> str:
    """
    Nettoie une chaîne représentant un montant avant conversion en float.
    Enlève espaces, symboles monétaires et séparateurs de milliers, garde le décimal.
    """
    if not value or not isinstance(value, str):
        return value
    s = value.strip()
    s = re.sub(r"[\s\xa0\u202f]", "", s)
    s = s.replace(",", ".")
    # Garder uniquement chiffres, point décimal et éventuel signe
    s = re.sub(r"[^\d.\-+]", "", s)
    # Plusieurs points : le dernier est le décimal
    parts = s.split(".")
    if len(parts) > 2:
        s = "".join(parts[:-1]) + "." + parts[-1]
    return s.strip() or "0"


def string_to_float(value: str) -> float:
    """
    Convertit une chaîne en float après nettoyage.
    Lève ValueError si la chaîne ne contient aucun chiffre ("N/A", "gratuit", "") ou reste invalide.
    """
    if isinstance(value, str) and not re.search(r"\d", value):
        raise ValueError(f"Montant illisible: {value!r}")
    cleaned = clean_amount_string(value) if isinstance(value, str) else str(value)
    try:
        return float(cleaned)
    except ValueError as e:
        raise ValueError(f"Montant illisible: {value!r}") from e
