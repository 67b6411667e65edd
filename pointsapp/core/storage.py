# pointsapp/core/storage.py : façade exposée à la présentation (zéro SQL ici)
from __future__ import annotations

from pointsapp.core.watcher import BalanceWatcher, OnChange, Subscription
from pointsapp.domain import admin as d_admin
from pointsapp.domain import grants as d_grants
from pointsapp.domain import ledger as d_ledger
from pointsapp.domain import players as d_players
from pointsapp.domain import prizes as d_prizes
from pointsapp.domain import quotas as d_quotas
from pointsapp.domain import referrals as d_referrals
from pointsapp.domain.models import (
    OnboardResult,
    RedeemResult,
    Snapshot,
    TapResult,
    TaskResult,
    UserSummary,
)
from pointsapp.domain.rewards import RewardKind
from pointsapp.domain.snapshots import get_snapshot


class Storage:
    # API points & limites (le solde ne bouge que via tap / tâches / parrainage / lots)
    def tap(self, user_id: int | str) -> TapResult: ...
    def complete_task(self, user_id: int | str, reward_kind: RewardKind | str, verified_proof: bool) -> TaskResult: ...
    def submit_keyword(self, user_id: int | str, keyword: str) -> TaskResult: ...
    def verify_subscription(self, user_id: int | str, checker: d_grants.MembershipChecker,
                            channel: str | None = None) -> TaskResult: ...
    def onboard(self, user_id: int | str, referrer_id: int | str | None = None, **profile) -> OnboardResult: ...
    def complete_onboarding(self, user_id: int | str) -> None: ...
    def get_balance(self, user_id: int | str) -> int: ...
    def get_snapshot(self, user_id: int | str) -> Snapshot: ...
    def subscribe(self, user_id: int | str, on_change: OnChange) -> Subscription: ...
    def redeem_prize(self, user_id: int | str, prize_id: int, idem_key: str) -> RedeemResult: ...
    def user_summaries(self, limit: int = 100, offset: int = 0) -> list[UserSummary]: ...


class SQLiteStorage(Storage):
    def __init__(self, watcher: BalanceWatcher | None = None):
        # Les migrations sont faites au boot (voir core/app.py).
        self.watcher = watcher or BalanceWatcher()

    # Taps
    def tap(self, user_id: int | str) -> TapResult:
        return d_quotas.tap(user_id)

    def remaining_taps(self, user_id: int | str) -> int:
        return d_quotas.remaining_taps(user_id)

    # Tâches
    def complete_task(self, user_id: int | str, reward_kind: RewardKind | str, verified_proof: bool) -> TaskResult:
        return d_grants.complete_task(user_id, reward_kind, bool(verified_proof))

    def submit_keyword(self, user_id: int | str, keyword: str) -> TaskResult:
        return d_grants.submit_keyword(user_id, keyword)

    def verify_subscription(self, user_id: int | str, checker: d_grants.MembershipChecker,
                            channel: str | None = None) -> TaskResult:
        return d_grants.verify_subscription(user_id, checker, channel)

    # Arrivée / parrainage
    def onboard(self, user_id: int | str, referrer_id: int | str | None = None, **profile) -> OnboardResult:
        return d_referrals.onboard(user_id, referrer_id, **profile)

    def onboard_from_start_param(self, user_id: int | str, start_param: str | None, **profile) -> OnboardResult:
        payload = d_referrals.decode_start_param(start_param)
        profile.setdefault("source", payload.source)
        return d_referrals.onboard(user_id, payload.referrer_id, **profile)

    def complete_onboarding(self, user_id: int | str) -> None:
        d_players.complete_onboarding(user_id)

    # Lecture (source de vérité: users.points)
    def get_balance(self, user_id: int | str) -> int:
        return d_ledger.get_balance(user_id)

    def get_snapshot(self, user_id: int | str) -> Snapshot:
        return get_snapshot(user_id)

    def subscribe(self, user_id: int | str, on_change: OnChange) -> Subscription:
        return self.watcher.subscribe(user_id, on_change)

    # Lots
    def redeem_prize(self, user_id: int | str, prize_id: int, idem_key: str) -> RedeemResult:
        return d_prizes.redeem_prize(user_id, prize_id, idem_key)

    # Admin
    def user_summaries(self, limit: int = 100, offset: int = 0) -> list[UserSummary]:
        return d_admin.user_summaries(limit, offset)

    def set_points(self, user_id: int | str, points: int) -> None:
        d_admin.set_points(user_id, points)

    def delete_user(self, user_id: int | str) -> None:
        d_admin.delete_user(user_id)
