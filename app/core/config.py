"""
Configuration de l'application via variables d'environnement.
Utilise Pydantic BaseSettings pour le chargement et la validation au démarrage.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Paramètres de l'application chargés depuis l'environnement."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    port: int = Field(3000, ge=1, le=65535)
    """Port d'écoute du serveur HTTP."""

    app_api_key: str = Field(..., min_length=1)
    """Secret partagé attendu dans l'en-tête x-api-key (obligatoire)."""

    mistral_api_key: str = Field(..., min_length=1)
    """Clé API Mistral (obligatoire)."""

    cc_fs_bucket: str = Field("/dataset/bills", min_length=1)
    """Dossier du FS Bucket où sont sauvegardés les scans."""

    app_home: Optional[str] = None
    """Préfixe optionnel du chemin du bucket (répertoire de l'application)."""

    llm_model: str = "mistral-small-latest"
    llm_base_url: str = "https://api.mistral.ai/v1"

    # Variantes de prompt : system + user, ou un unique message user
    prompt_mode: Literal["system_user", "user_only"] = "system_user"

    # json_object : format de réponse imposé à l'API ; none : consigne seule
    response_format: Literal["json_object", "none"] = "json_object"

    max_body_size: int = Field(50 * 1024 * 1024, gt=0)
    """Taille maximale du corps de requête (octets)."""

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Niveau de log inconnu: {value}")
        return level

    @property
    def bucket_path(self) -> Path:
        """
        Chemin complet du bucket.
        Si APP_HOME est défini, CC_FS_BUCKET est relatif à ce répertoire même s'il commence par '/'.
        """
        if not self.app_home:
            return Path(self.cc_fs_bucket)
        return Path(self.app_home) / self.cc_fs_bucket.lstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Retourne l'instance des settings, chargée une seule fois."""
    return Settings()
