"""Tests for one-time rewards (quiz, keyword, channel subscription)."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from pointsapp.domain import grants, ledger, quotas
from pointsapp.domain import players as d_players
from pointsapp.domain.errors import NotFound, ValidationFailure
from pointsapp.domain.rewards import RewardKind
from pointsapp.persistence import completions


class FakeChecker:
    def __init__(self, member: bool):
        self.member = member
        self.calls = []

    def is_member(self, channel, user_id):
        self.calls.append((channel, user_id))
        return self.member


class TestGrantOnce:
    def test_first_grant_credits(self, make_user):
        make_user("1")
        assert grants.grant_once("1", "quiz", 200) is True
        assert ledger.get_balance("1") == 200

    def test_second_grant_is_a_noop(self, make_user):
        make_user("1")
        grants.grant_once("1", "quiz", 200)
        assert grants.grant_once("1", "quiz", 200) is False
        assert ledger.get_balance("1") == 200

    def test_concurrent_grants_succeed_once(self, make_user):
        make_user("1")
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: grants.grant_once("1", "quiz", 200), range(20)))
        assert results.count(True) == 1
        assert ledger.get_balance("1") == 200
        assert completions.kinds_for("1") == {"quiz"}

    def test_kinds_are_independent(self, make_user):
        make_user("1")
        assert grants.grant_once("1", "quiz", 200)
        assert grants.grant_once("1", "keyword", 100)
        assert ledger.get_balance("1") == 300

    def test_unknown_user_leaves_no_record(self):
        with pytest.raises(NotFound):
            grants.grant_once("404", "quiz", 200)
        assert completions.kinds_for("404") == set()

    @pytest.mark.parametrize("kind,points", [("", 10), ("quiz", 0), ("quiz", -5)])
    def test_invalid_input(self, make_user, kind, points):
        make_user("1")
        with pytest.raises(ValidationFailure):
            grants.grant_once("1", kind, points)
        assert ledger.get_balance("1") == 0

    def test_record_keeps_awarded_points(self, make_user):
        make_user("1")
        grants.grant_once("1", "quiz", 200)
        assert completions.get("1", "quiz")["points_awarded"] == 200


class TestCompleteTask:
    def test_quiz_retry(self, make_user):
        make_user("1")
        first = grants.complete_task("1", RewardKind.QUIZ, True)
        second = grants.complete_task("1", "quiz", True)

        assert first.granted and first.new_balance == 200 and first.reason == "granted"
        assert not second.granted and second.reason == "already_granted"
        assert ledger.get_balance("1") == 200

    def test_unverified_proof_grants_nothing(self, make_user):
        make_user("1")
        result = grants.complete_task("1", RewardKind.QUIZ, False)
        assert not result.granted and result.reason == "not_verified"
        assert not grants.has_completed("1", RewardKind.QUIZ)

    def test_unknown_kind(self, make_user):
        make_user("1")
        with pytest.raises(ValidationFailure):
            grants.complete_task("1", "bonus", True)

    def test_balance_is_sum_of_successful_grants(self, make_user):
        make_user("1")
        granted = 0
        for kind in ("quiz", "keyword", "telegram_subscription", "quiz", "keyword"):
            r = grants.complete_task("1", kind, True)
            granted += {"quiz": 200, "keyword": 100, "telegram_subscription": 150}[kind] if r.granted else 0
        taps = sum(quotas.tap("1", "2025-03-27").accepted for _ in range(11))
        assert ledger.get_balance("1") == granted + taps * 2 == 450 + 20


class TestKeyword:
    def test_empty_keyword(self, make_user):
        make_user("1")
        with pytest.raises(ValidationFailure):
            grants.submit_keyword("1", "   ")

    def test_wrong_keyword(self, make_user):
        make_user("1")
        result = grants.submit_keyword("1", "freud")
        assert result.reason == "not_verified"
        assert d_players.get("1")["keyword_completed"] is False

    def test_right_keyword_sets_flag(self, make_user):
        make_user("1")
        result = grants.submit_keyword("1", " TalentSY ")
        assert result.granted and result.new_balance == 100
        assert d_players.get("1")["keyword_completed"] is True
        assert grants.submit_keyword("1", "talentsy").reason == "already_granted"
        assert ledger.get_balance("1") == 100


class TestSubscription:
    def test_member_is_credited_once(self, make_user):
        make_user("1")
        checker = FakeChecker(member=True)
        first = grants.verify_subscription("1", checker, "talentsy_channel")
        second = grants.verify_subscription("1", checker, "talentsy_channel")

        assert first.granted and first.new_balance == 150
        assert second.reason == "already_granted"
        assert checker.calls == [("talentsy_channel", "1")]

    def test_non_member_is_not_credited(self, make_user):
        make_user("1")
        result = grants.verify_subscription("1", FakeChecker(member=False), "talentsy_channel")
        assert result.reason == "not_verified"
        assert ledger.get_balance("1") == 0

    def test_unknown_user_skips_checker(self):
        checker = FakeChecker(member=True)
        with pytest.raises(NotFound):
            grants.verify_subscription("404", checker, "c")
        assert checker.calls == []
