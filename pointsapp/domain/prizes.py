# pointsapp/domain/prizes.py
from __future__ import annotations
import logging
from dataclasses import dataclass

from ..core.db.base import atomic
from ..persistence import players as players_repo
from ..persistence import prizes as repo
from .errors import ValidationFailure
from .models import RedeemResult
from .players import uid, ensure_exists

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prize:
    id: int
    name: str
    points: int


PRIZES: dict[int, Prize] = {
    1: Prize(1, "Найди свой путь: практикум по поиску призвания", 600),
    2: Prize(2, "Практикум «Путь к уверенности»", 600),
}

def get_prize(prize_id: int) -> Prize:
    try:
        return PRIZES[int(prize_id)]
    except (KeyError, TypeError, ValueError):
        raise ValidationFailure(f"unknown prize: {prize_id!r}") from None

def redeem_prize(user_id: int | str, prize_id: int, idem_key: str) -> RedeemResult:
    """
    Échange de points contre un lot. Débit conditionnel (points >= coût) + trace,
    dans une seule transaction. Même idem_key rejoué → pas de second débit.
    """
    u = uid(user_id)
    prize = get_prize(prize_id)
    key = (idem_key or "").strip()
    if not key:
        raise ValidationFailure("idem_key is required")
    with atomic():
        ensure_exists(u)
        if repo.find(u, key) is not None:
            return RedeemResult(redeemed=False, new_balance=int(players_repo.balance(u) or 0),
                                reason="already_redeemed")
        if not players_repo.debit_if_enough(u, prize.points):
            return RedeemResult(redeemed=False, new_balance=int(players_repo.balance(u) or 0),
                                reason="insufficient_points")
        repo.record(u, key, prize.id, prize.name, prize.points)
        balance = players_repo.balance(u)
    log.info("Échange lot %s par %s (-%d)", prize.id, u, prize.points)
    return RedeemResult(redeemed=True, new_balance=int(balance or 0), reason="redeemed")

def exchanges(user_id: int | str) -> list[dict]:
    return repo.list_for(uid(user_id))
