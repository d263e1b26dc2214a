"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


def _resolve_env_file() -> Path | str:
    """Retourne le fichier .env à charger.

    Priorité:
    1) ENV_FILE (chemin explicite)
    2) .env.{APP_ENV} si présent
    3) .env (défaut, même absent)
    """
    explicit = os.getenv("ENV_FILE")
    if explicit:
        return explicit
    cwd = Path.cwd()
    specific = cwd / f".env.{os.getenv('APP_ENV', 'dev')}"
    if specific.exists():
        return specific
    return cwd / ".env"


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file(),
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "partnership-hub"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True
    APP_URL: str = "http://localhost:3000"
    CORS_ORIGINS: list[AnyHttpUrl] | list[str] = []
    LOG_JSON: bool = False

    # Base de données (SQLite mémoire par défaut pour dev/tests)
    DATABASE_URL: str | None = None

    # JWT émis par le fournisseur d'authentification externe
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"
    JWT_AUDIENCE: str | None = None

    # Notifications (fonction d'envoi d'e-mails externe)
    NOTIFICATION_FUNCTION_URL: str | None = None
    NOTIFICATION_API_KEY: str | None = None
    NOTIFICATION_TIMEOUT_S: float = 5.0
    NOTIFICATIONS_ASYNC: bool = False
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"

    # Tableau de bord
    ACTIVITY_FEED_LIMIT: int = 20


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
