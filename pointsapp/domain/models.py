from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Snapshot(BaseModel):
    user_id: str
    balance: int
    flags: dict[str, bool] = Field(default_factory=dict)
    taps_today: int = 0
    remaining_taps_today: int = 0
    referral_count: int = 0

    model_config = ConfigDict(frozen=True)


class TapResult(BaseModel):
    accepted: bool
    new_balance: int
    remaining_taps_today: int


class TaskResult(BaseModel):
    granted: bool
    new_balance: int
    reason: str  # "granted" | "already_granted" | "not_verified"


class OnboardResult(BaseModel):
    referral_recorded: bool


class RedeemResult(BaseModel):
    redeemed: bool
    new_balance: int
    reason: str  # "redeemed" | "already_redeemed" | "insufficient_points"


class StartPayload(BaseModel):
    source: Optional[str] = None
    referrer_id: Optional[str] = None


class UserSummary(BaseModel):
    user_id: str
    username: str = ""
    first_name: str = ""
    points: int = 0
    quiz_completed: bool = False
    keyword_completed: bool = False
    telegram_subscribed: bool = False
    tasks_completed: int = 0
    referral_count: int = 0
    prize_count: int = 0
    created_ts: int = 0
