# pointsapp/domain/grants.py
from __future__ import annotations
import logging
from typing import Protocol

from ..core.config import settings
from ..core.db.base import atomic
from ..persistence import completions as repo
from ..persistence import players as players_repo
from .errors import ValidationFailure
from .models import TaskResult
from .players import uid, ensure_exists
from .rewards import RewardKind, parse_kind, points_for

log = logging.getLogger(__name__)


class MembershipChecker(Protocol):
    def is_member(self, channel: str, user_id: str) -> bool: ...


def grant_once(user_id: int | str, reward_kind: str, points: int) -> bool:
    """
    Crédit idempotent: la première insertion de (user_id, reward_kind) crédite `points`,
    toutes les suivantes renvoient False sans toucher au solde.
    """
    u = uid(user_id)
    kind = str(reward_kind or "").strip()
    if not kind:
        raise ValidationFailure("reward_kind is required")
    if int(points) <= 0:
        raise ValidationFailure("points must be > 0")
    with atomic():
        ensure_exists(u)
        if not repo.insert_once(u, kind, int(points)):
            return False
        players_repo.add_points(u, int(points))
    log.info("Grant %s → %s (+%d)", kind, u, int(points))
    return True

def has_completed(user_id: int | str, reward_kind: RewardKind | str) -> bool:
    kind = reward_kind.value if isinstance(reward_kind, RewardKind) else str(reward_kind)
    return repo.has(uid(user_id), kind)

def complete_task(user_id: int | str, reward_kind: RewardKind | str, verified_proof: bool) -> TaskResult:
    """La preuve (abonnement, mot-clé...) est vérifiée par l'appelant; on n'applique que l'unicité."""
    kind = parse_kind(reward_kind)
    u = uid(user_id)
    with atomic():
        ensure_exists(u)
        if not verified_proof:
            granted, reason = False, "not_verified"
        else:
            granted = grant_once(u, kind.value, points_for(kind))
            reason = "granted" if granted else "already_granted"
            if granted and kind is RewardKind.KEYWORD:
                players_repo.set_flag(u, "keyword_completed", True)
        balance = players_repo.balance(u)
    return TaskResult(granted=granted, new_balance=int(balance or 0), reason=reason)

def submit_keyword(user_id: int | str, keyword: str) -> TaskResult:
    word = (keyword or "").strip()
    if not word:
        raise ValidationFailure("keyword is required")
    matched = word.lower() == settings.secret_keyword.strip().lower()
    return complete_task(user_id, RewardKind.KEYWORD, matched)

def verify_subscription(user_id: int | str, checker: MembershipChecker, channel: str | None = None) -> TaskResult:
    """Déjà crédité → pas d'appel réseau. Sinon on demande au vérificateur externe."""
    u = uid(user_id)
    ensure_exists(u)
    kind = RewardKind.TELEGRAM_SUBSCRIPTION
    if repo.has(u, kind.value):
        return TaskResult(granted=False, new_balance=int(players_repo.balance(u) or 0), reason="already_granted")
    is_member = bool(checker.is_member(channel or settings.channel_username, u))
    return complete_task(u, kind, is_member)
