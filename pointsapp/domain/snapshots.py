from __future__ import annotations

from ..core.db.base import atomic
from ..persistence import completions as completions_repo
from ..persistence import players as players_repo
from ..persistence import referrals as referrals_repo
from ..persistence import taps as taps_repo
from .clock import today_key
from .errors import NotFound
from .models import Snapshot
from .players import uid
from .rewards import DAILY_TAP_CAP, RewardKind

def get_snapshot(user_id: int | str, day: str | None = None) -> Snapshot:
    u = uid(user_id)
    day = day or today_key()
    # une seule transaction de lecture: solde, compteur et complétions du même instant (WAL)
    with atomic(immediate=False):
        user = players_repo.get(u)
        if user is None:
            raise NotFound(u)
        kinds = completions_repo.kinds_for(u)
        taps = taps_repo.get_count(u, day)
        referral_count = referrals_repo.count_for(u)
    return Snapshot(
        user_id=u,
        balance=user["points"],
        flags={
            "onboarding_completed": user["onboarding_completed"],
            "keyword_completed": user["keyword_completed"],
            "quiz_completed": RewardKind.QUIZ.value in kinds,
            "telegram_subscribed": RewardKind.TELEGRAM_SUBSCRIPTION.value in kinds,
        },
        taps_today=taps,
        remaining_taps_today=max(0, DAILY_TAP_CAP - taps),
        referral_count=referral_count,
    )
