"""Tests for admin operations, diagnostics and the storage facade."""

import pytest

from pointsapp.core.app import bootstrap
from pointsapp.core.db.migrations import LATEST
from pointsapp.core.health import diagnostics
from pointsapp.domain import admin, grants, ledger, prizes, quotas, referrals
from pointsapp.domain.errors import NotFound, ValidationFailure
from pointsapp.persistence import completions


class TestAdmin:
    def test_user_summaries(self, make_user):
        make_user("A", username="a")
        make_user("B")
        referrals.record_referral("A", "B")
        grants.complete_task("A", "quiz", True)
        grants.submit_keyword("A", "talentsy")
        prizes.redeem_prize("A", 1, "x")

        rows = {s.user_id: s for s in admin.user_summaries()}
        assert rows["A"].tasks_completed == 2
        assert rows["A"].referral_count == 1
        assert rows["A"].prize_count == 0
        assert rows["A"].points == 400
        assert rows["B"].tasks_completed == 0

    def test_user_summaries_task_flags(self, make_user):
        make_user("A")
        make_user("B")
        grants.complete_task("A", "quiz", True)
        grants.submit_keyword("A", "talentsy")
        grants.complete_task("B", "telegram_subscription", True)

        rows = {s.user_id: s for s in admin.user_summaries()}
        a, b = rows["A"], rows["B"]
        assert (a.quiz_completed, a.keyword_completed, a.telegram_subscribed) == (True, True, False)
        assert (b.quiz_completed, b.keyword_completed, b.telegram_subscribed) == (False, False, True)
        assert a.tasks_completed == 2
        assert b.tasks_completed == 1

    def test_set_points(self, make_user):
        make_user("A")
        admin.set_points("A", 42)
        assert ledger.get_balance("A") == 42
        with pytest.raises(ValidationFailure):
            admin.set_points("A", -1)
        with pytest.raises(NotFound):
            admin.set_points("404", 1)

    def test_delete_user_cascades(self, make_user):
        make_user("A")
        make_user("B")
        referrals.record_referral("A", "B")
        quotas.tap("B")
        grants.complete_task("B", "quiz", True)

        admin.delete_user("B")

        assert referrals.referral_count("A") == 0
        assert completions.kinds_for("B") == set()
        with pytest.raises(NotFound):
            admin.delete_user("B")


class TestDiagnostics:
    def test_diagnostics(self, make_user):
        make_user("A")
        info = diagnostics()
        assert info["users"] == 1
        assert info["user_version"] == LATEST
        assert info["journal_mode"] == "WAL"
        assert info["memory_rss_mb"] > 0


class TestStorageFacade:
    def test_end_to_end(self, tmp_path):
        storage = bootstrap(str(tmp_path / "app.db"))
        storage.onboard("A", username="a")
        result = storage.onboard_from_start_param("B", "eyJyZWZlcnJlcl9pZCI6ICJBIiwgInNvdXJjZSI6ICJhZHMifQ==")
        assert result.referral_recorded

        seen = []
        storage.subscribe("A", seen.append)
        assert storage.tap("A").accepted
        assert storage.complete_task("A", "quiz", True).granted
        storage.watcher.check_now()

        assert storage.get_balance("A") == 100 + 2 + 200
        assert seen[-1].balance == 302
        assert storage.get_snapshot("A").referral_count == 1
        assert storage.remaining_taps("A") == 9
