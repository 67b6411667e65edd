# pointsapp/domain/errors.py
from __future__ import annotations


class PointsError(Exception):
    pass


class NotFound(PointsError, LookupError):
    """Identité utilisateur inconnue. Remontée telle quelle, pas de retry automatique."""

    def __init__(self, user_id: str):
        super().__init__(f"unknown user: {user_id}")
        self.user_id = user_id


class ValidationFailure(PointsError, ValueError):
    """Entrée invalide, rejetée avant toute écriture."""


class TransientStorageFailure(PointsError):
    """Base verrouillée/indisponible: issue inconnue, retry sûr sur les chemins idempotents."""
