"""Tests for referral attribution and start payload decoding."""

import base64
import json
import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from pointsapp.domain import admin, ledger, referrals
from pointsapp.domain import players as d_players
from pointsapp.domain.errors import NotFound
from pointsapp.domain.rewards import REFERRAL_POINTS


def _start_param(data) -> str:
    return base64.b64encode(json.dumps(data).encode()).decode()


class TestRecordReferral:
    def test_second_referrer_is_ignored(self, make_user):
        for u in ("A", "B", "C"):
            make_user(u)

        assert referrals.record_referral("A", "B") is True
        assert referrals.record_referral("C", "B") is False

        assert ledger.get_balance("A") == REFERRAL_POINTS
        assert ledger.get_balance("C") == 0
        assert referrals.referrer_of("B") == "A"

    def test_self_referral(self, make_user):
        make_user("A")
        assert referrals.record_referral("A", "A") is False
        assert ledger.get_balance("A") == 0
        assert referrals.referrer_of("A") is None

    def test_unknown_referrer(self, make_user):
        make_user("B")
        assert referrals.record_referral("ghost", "B") is False
        assert referrals.referrer_of("B") is None

    def test_unknown_referred(self, make_user):
        make_user("A")
        with pytest.raises(NotFound):
            referrals.record_referral("A", "ghost")

    def test_referred_user_gets_no_bonus(self, make_user):
        make_user("A")
        make_user("B")
        referrals.record_referral("A", "B")
        assert ledger.get_balance("B") == 0

    def test_bonus_per_distinct_referred_user(self, make_user):
        for u in ("A", "B", "C"):
            make_user(u)
        referrals.record_referral("A", "B")
        referrals.record_referral("A", "C")
        referrals.record_referral("A", "C")
        assert ledger.get_balance("A") == 2 * REFERRAL_POINTS
        assert referrals.referral_count("A") == 2
        assert referrals.referred_users("A") == ["B", "C"]

    def test_cycle_is_refused(self, make_user):
        for u in ("A", "B", "C"):
            make_user(u)
        assert referrals.record_referral("A", "B")
        assert referrals.record_referral("B", "C")
        assert referrals.record_referral("C", "A") is False
        assert referrals.record_referral("B", "A") is False
        assert ledger.get_balance("C") == 0

    def test_concurrent_referrers_single_winner(self, make_user):
        make_user("target")
        candidates = [f"r{i}" for i in range(12)]
        for c in candidates:
            make_user(c)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda r: referrals.record_referral(r, "target"), candidates))

        assert results.count(True) == 1
        winner = candidates[results.index(True)]
        assert referrals.referrer_of("target") == winner
        assert sum(ledger.get_balance(c) for c in candidates) == REFERRAL_POINTS

    def test_recreated_referred_user_links_without_second_bonus(self, make_user, caplog):
        make_user("A")
        make_user("B")
        assert referrals.record_referral("A", "B")
        admin.delete_user("B")
        make_user("B")

        with caplog.at_level(logging.WARNING, logger="pointsapp.domain.referrals"):
            assert referrals.record_referral("A", "B") is True

        assert referrals.referrer_of("B") == "A"
        assert ledger.get_balance("A") == REFERRAL_POINTS
        assert "sans bonus" in caplog.text


class TestOnboard:
    def test_onboard_registers_and_records(self, make_user):
        make_user("A")
        result = referrals.onboard("B", "A", first_name="Anna")
        assert result.referral_recorded is True
        assert d_players.get("B")["first_name"] == "Anna"
        assert ledger.get_balance("A") == REFERRAL_POINTS

    def test_onboard_without_referrer(self):
        assert referrals.onboard("B").referral_recorded is False
        assert d_players.get("B")["points"] == 0

    def test_no_attribution_after_onboarding(self, make_user):
        make_user("A")
        referrals.onboard("B")
        d_players.complete_onboarding("B")
        assert referrals.onboard("B", "A").referral_recorded is False
        assert referrals.referrer_of("B") is None

    def test_repeated_onboard_is_idempotent(self, make_user):
        make_user("A")
        assert referrals.onboard("B", "A").referral_recorded is True
        assert referrals.onboard("B", "A").referral_recorded is False
        assert ledger.get_balance("A") == REFERRAL_POINTS


class TestDecodeStartParam:
    def test_full_payload(self):
        payload = referrals.decode_start_param(_start_param({"source": "vk", "referrer_id": 42}))
        assert payload.source == "vk"
        assert payload.referrer_id == "42"

    def test_urlsafe_without_padding(self):
        raw = base64.urlsafe_b64encode(json.dumps({"referrer_id": "7"}).encode()).decode().rstrip("=")
        assert referrals.decode_start_param(raw).referrer_id == "7"

    @pytest.mark.parametrize("raw", [None, "", "not base64 at all!", _start_param([1, 2]), _start_param("x")])
    def test_garbage_decodes_to_empty(self, raw):
        payload = referrals.decode_start_param(raw)
        assert payload.source is None and payload.referrer_id is None
