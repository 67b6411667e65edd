from __future__ import annotations
import logging

from ..core.db.base import atomic
from ..persistence import players as repo
from .errors import NotFound, ValidationFailure

log = logging.getLogger(__name__)

def uid(user_id: int | str) -> str:
    """Identité Telegram normalisée (texte). Vide → ValidationFailure."""
    s = str(user_id).strip() if user_id is not None else ""
    if not s:
        raise ValidationFailure("user_id is required")
    return s

def get(user_id: int | str) -> dict:
    user = repo.get(uid(user_id))
    if user is None:
        raise NotFound(uid(user_id))
    return user

def ensure_exists(user_id: str) -> None:
    if not repo.exists(user_id):
        raise NotFound(user_id)

def register(user_id: int | str, *, username: str = "", first_name: str = "",
             avatar_url: str | None = None, source: str | None = None) -> dict:
    """Premier passage: crée l'utilisateur (solde 0). Sinon rafraîchit le profil."""
    u = uid(user_id)
    created = repo.upsert_profile(u, username or "", first_name or "", avatar_url or "", source or "")
    if created:
        log.info("Nouvel utilisateur %s (source=%s)", u, source or "-")
    return repo.get(u)

def complete_onboarding(user_id: int | str) -> None:
    u = uid(user_id)
    with atomic():
        ensure_exists(u)
        repo.set_flag(u, "onboarding_completed", True)

def count() -> int:
    return repo.count_users()
