"""
Sauvegarde des scans dans le FS Bucket.

Le bucket est un dossier plat appartenant à la passerelle : chaque scan y est écrit
sous un nom unique <uuid4>_<timestamp ms>.jpg. Pas de nettoyage ni de quota.
L'écriture est lancée en tâche de fond après la décision de réponse : ses échecs sont
journalisés et jamais remontés au client.
"""

import base64
import binascii
import logging
import re
import time
import uuid
from pathlib import Path
from typing import Optional, Union

import aiofiles
import aiofiles.os

from app.services.normalization import strip_data_uri

logger = logging.getLogger(__name__)

_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def decode_image_base64(image_base64: str) -> bytes:
    """
    Décode le scan reçu en octets.
    Tolère un préfixe data URI, les retours à la ligne (base64 MIME), l'absence de padding
    et l'alphabet URL-safe (- et _). Lève ValueError si le contenu n'est pas du base64.
    """
    payload = re.sub(r"\s+", "", strip_data_uri(image_base64)).rstrip("=")
    payload = payload.translate(_URLSAFE_TO_STANDARD)
    payload += "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"base64 invalide: {e}") from e


class ImageBucket:
    """Dossier de stockage des scans reçus."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    @staticmethod
    def new_filename() -> str:
        return f"{uuid.uuid4()}_{int(time.time() * 1000)}.jpg"

    async def save(self, image_base64: str) -> Path:
        """
        Décode le scan et l'écrit dans le bucket (créé si absent).
        Lève ValueError si le base64 est invalide, OSError en cas d'échec d'écriture.
        """
        content = decode_image_base64(image_base64)

        await aiofiles.os.makedirs(self.root, exist_ok=True)
        path = self.root / self.new_filename()

        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

        logger.info("Image sauvegardée dans le FS Bucket : %s (%d octets)", path, len(content))
        return path

    async def save_in_background(self, image_base64: str) -> Optional[Path]:
        """Corps de la tâche de fond : les erreurs sont journalisées puis ignorées."""
        try:
            return await self.save(image_base64)
        except (OSError, ValueError):
            logger.exception(
                "Erreur lors de la sauvegarde de l'image dans le FS Bucket",
                extra={"bucket": str(self.root)},
            )
            return None
