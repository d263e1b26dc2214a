"""
Vérification des jetons émis par le fournisseur d'authentification.

La gestion des sessions reste externe: l'API se contente de valider le JWT
(signature, expiration, audience éventuelle) et d'en extraire l'utilisateur.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError
from pydantic import BaseModel, ValidationError


class TokenData(BaseModel):
    """Données contenues dans un token JWT."""

    sub: str
    email: str | None = None


def create_access_token(
    secret: str, alg: str, expires_min: int, payload: dict[str, Any]
) -> str:
    """Crée un token JWT signé avec expiration (outillage dev/tests)."""
    to_encode = payload.copy()
    to_encode["exp"] = datetime.now(UTC) + timedelta(minutes=expires_min)
    return jwt.encode(to_encode, secret, algorithm=alg)


def decode_token(
    token: str, secret: str, alg: str, audience: str | None = None
) -> TokenData | None:
    """Décode et valide un token JWT; None si invalide ou expiré."""
    options = {"verify_aud": audience is not None}
    try:
        data = jwt.decode(token, secret, algorithms=[alg], audience=audience, options=options)
        return TokenData(**data)
    except (InvalidTokenError, ValidationError):
        return None
