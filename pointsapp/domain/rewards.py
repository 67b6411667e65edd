# pointsapp/domain/rewards.py
from __future__ import annotations
from enum import Enum

from .errors import ValidationFailure

# ───────── Barème (valeurs visibles côté produit) ─────────
TAP_POINTS      = 2
DAILY_TAP_CAP   = 10   # /jour

QUIZ_POINTS         = 200
KEYWORD_POINTS      = 100
SUBSCRIPTION_POINTS = 150
REFERRAL_POINTS     = 100  # pour le parrain, par filleul distinct

REFERRAL_PREFIX = "referral:"


class RewardKind(str, Enum):
    QUIZ = "quiz"
    KEYWORD = "keyword"
    TELEGRAM_SUBSCRIPTION = "telegram_subscription"


TASK_POINTS: dict[RewardKind, int] = {
    RewardKind.QUIZ: QUIZ_POINTS,
    RewardKind.KEYWORD: KEYWORD_POINTS,
    RewardKind.TELEGRAM_SUBSCRIPTION: SUBSCRIPTION_POINTS,
}


def referral_kind(referred_id: str) -> str:
    return f"{REFERRAL_PREFIX}{referred_id}"


def parse_kind(kind: RewardKind | str) -> RewardKind:
    try:
        return RewardKind(kind)
    except ValueError:
        raise ValidationFailure(f"unknown reward kind: {kind!r}") from None


def points_for(kind: RewardKind | str) -> int:
    return TASK_POINTS[parse_kind(kind)]
