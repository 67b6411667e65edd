# pointsapp/domain/referrals.py
from __future__ import annotations
import base64, binascii, json, logging

from ..core.db.base import atomic
from ..persistence import players as players_repo
from ..persistence import referrals as repo
from . import players as d_players
from .grants import grant_once
from .models import OnboardResult, StartPayload
from .players import uid, ensure_exists
from .rewards import REFERRAL_POINTS, referral_kind

log = logging.getLogger(__name__)

def decode_start_param(raw: str | None) -> StartPayload:
    """
    startapp Telegram = JSON encodé en base64 ({"source": ..., "referrer_id": ...}).
    Payload illisible → payload vide (on ne bloque jamais l'arrivée d'un utilisateur pour ça).
    """
    if not raw:
        return StartPayload()
    try:
        padded = raw + "=" * (-len(raw) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        log.warning("start_param illisible: %r", raw)
        return StartPayload()
    if not isinstance(data, dict):
        return StartPayload()
    source = data.get("source")
    referrer = data.get("referrer_id")
    return StartPayload(
        source=str(source) if source not in (None, "") else None,
        referrer_id=str(referrer) if referrer not in (None, "") else None,
    )

def record_referral(referrer_id: int | str, referred_id: int | str) -> bool:
    """
    Lien parrain → filleul, une seule fois par filleul, puis bonus au parrain.
    Auto-parrainage, parrain inconnu, filleul déjà parrainé ou boucle: False, sans effet.
    True = lien enregistré. Le bonus reste unique par (parrain, filleul): un filleul
    supprimé puis recréé peut être relié à nouveau, sans second bonus.
    """
    referrer, referred = uid(referrer_id), uid(referred_id)
    if referrer == referred:
        log.debug("Auto-parrainage ignoré: %s", referred)
        return False
    with atomic():
        ensure_exists(referred)
        if not players_repo.exists(referrer):
            log.debug("Parrain inconnu ignoré: %s → %s", referrer, referred)
            return False
        if repo.is_upline(referred, referrer):
            log.debug("Boucle de parrainage ignorée: %s → %s", referrer, referred)
            return False
        if not repo.insert_once(referrer, referred):
            return False
        paid = grant_once(referrer, referral_kind(referred), REFERRAL_POINTS)
    if paid:
        log.info("Parrainage %s → %s", referrer, referred)
    else:
        log.warning("Parrainage %s → %s enregistré sans bonus (déjà versé pour ce filleul)", referrer, referred)
    return True

def onboard(user_id: int | str, referrer_id: int | str | None = None, **profile) -> OnboardResult:
    """Arrivée d'un utilisateur: enregistrement + attribution du parrain pendant la première session."""
    user = d_players.register(user_id, **profile)
    if referrer_id is None or not str(referrer_id).strip():
        return OnboardResult(referral_recorded=False)
    if user["onboarding_completed"]:
        return OnboardResult(referral_recorded=False)
    return OnboardResult(referral_recorded=record_referral(referrer_id, user["user_id"]))

def referrer_of(user_id: int | str) -> str | None:
    return repo.referrer_of(uid(user_id))

def referral_count(user_id: int | str) -> int:
    return repo.count_for(uid(user_id))

def referred_users(user_id: int | str) -> list[str]:
    u = uid(user_id)
    ensure_exists(u)
    return repo.referred_by(u)
