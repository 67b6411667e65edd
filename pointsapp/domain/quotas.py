from __future__ import annotations
import logging

from ..core.db.base import atomic
from ..persistence import players as players_repo
from ..persistence import taps as taps_repo
from .clock import today_key
from .models import TapResult
from .players import uid, ensure_exists
from .rewards import DAILY_TAP_CAP, TAP_POINTS

log = logging.getLogger(__name__)

def try_consume_tap(user_id: int | str, day: str | None = None, cap: int = DAILY_TAP_CAP) -> bool:
    """
    Consomme un tap du jour si le plafond n'est pas atteint.
    Ne connaît pas les points: c'est à l'appelant de créditer.
    """
    u = uid(user_id)
    day = day or today_key()
    with atomic():
        ensure_exists(u)
        return taps_repo.try_consume(u, day, int(cap))

def taps_today(user_id: int | str, day: str | None = None) -> int:
    return taps_repo.get_count(uid(user_id), day or today_key())

def remaining_taps(user_id: int | str, day: str | None = None, cap: int = DAILY_TAP_CAP) -> int:
    return max(0, int(cap) - taps_today(user_id, day))

def tap(user_id: int | str, day: str | None = None) -> TapResult:
    """Tap + crédit de TAP_POINTS dans la même transaction."""
    u = uid(user_id)
    day = day or today_key()
    with atomic():
        accepted = try_consume_tap(u, day)
        if accepted:
            new_balance = players_repo.add_points(u, TAP_POINTS)
        else:
            new_balance = players_repo.balance(u)
        count = taps_repo.get_count(u, day)
    if not accepted:
        log.debug("Plafond quotidien atteint pour %s (%s)", u, day)
    return TapResult(
        accepted=accepted,
        new_balance=int(new_balance or 0),
        remaining_taps_today=max(0, DAILY_TAP_CAP - count),
    )
