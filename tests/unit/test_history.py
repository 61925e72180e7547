"""
Tests for the history component: saved calculations and guest mode.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from cgwise.components.calculator import BuiltinCatalog
from cgwise.components.history import (
    MSG_GUEST_DISABLED,
    MSG_NO_VALUES,
    MSG_NOT_OWNED,
    MSG_SESSION_NOT_FOUND,
    CleanupGuestSessionsInput,
    ClearCalculationsInput,
    CreateGuestSessionInput,
    DeleteCalculationInput,
    GuestSessionInput,
    ListByDateInput,
    ListCalculationsInput,
    SaveCalculationInput,
    SaveGuestCalculationInput,
    guest_limit_message,
    run_cleanup_guest_sessions,
    run_clear_all,
    run_clear_guest_calculations,
    run_create_guest_session,
    run_delete,
    run_get_guest_session,
    run_list,
    run_list_by_date,
    run_list_guest_calculations,
    run_save,
    run_save_guest_calculation,
)
from cgwise.components.settings import GUEST_MODE_ENABLED, MAX_GUEST_CALCULATIONS


@pytest.fixture
def catalog() -> BuiltinCatalog:
    return BuiltinCatalog()


@pytest.fixture
def save(saved_repo, catalog, policy, clock):
    def _save(actor, calculator_id="qw", inputs=None, **kwargs):
        return run_save(
            SaveCalculationInput(
                actor=actor,
                calculator_id=calculator_id,
                inputs=inputs if inputs is not None else {"vw": 30, "ae": 0.02},
                **kwargs,
            ),
            repo=saved_repo,
            catalog=catalog,
            policy=policy,
            time=clock,
        )

    return _save


class TestSavedCalculations:
    def test_save_snapshot(self, save, starter_user, clock) -> None:
        out = save(starter_user, notes="  first pass  ")
        assert out.success
        calc = out.calculation
        assert calc is not None
        assert calc.calculator_name == "Specific Material Removal Rate"
        assert calc.calculator_short_name == "Q'w"
        assert calc.result.value == pytest.approx(10.0)
        assert calc.notes == "first pass"
        assert calc.saved_at == clock.now_utc()

    def test_zero_inputs_dropped(self, save, starter_user) -> None:
        out = save(starter_user, "hm", {"ae": 0.02, "qs": 60, "ds": 400, "dw": 0, "junk": 3})
        assert out.calculation is not None
        assert out.calculation.inputs == {"ae": 0.02, "qs": 60.0, "ds": 400.0}
        assert out.calculation.result.value is not None

    def test_all_zero_refused(self, save, starter_user, saved_repo) -> None:
        out = save(starter_user, inputs={"vw": 0, "ae": 0})
        assert not out.success
        assert out.error is not None
        assert out.error.code == "no_values"
        assert out.error.message == MSG_NO_VALUES
        assert saved_repo.list_by_user(starter_user.id) == []

    def test_partial_inputs_saved_without_value(self, save, starter_user) -> None:
        out = save(starter_user, inputs={"vw": 30})
        assert out.calculation is not None
        assert out.calculation.result.value is None

    def test_unknown_calculator(self, save, starter_user) -> None:
        out = save(starter_user, "nope")
        assert out.error is not None and out.error.code == "not_found"

    def test_unapproved_user_forbidden(self, save, user_factory) -> None:
        out = save(user_factory("p@example.com", status="pending"))
        assert out.error is not None and out.error.code == "forbidden"

    def test_list_newest_first(self, save, starter_user, saved_repo, clock) -> None:
        first = save(starter_user).calculation
        clock.advance(minutes=5)
        second = save(starter_user, "qs", {"vs": 35, "vw": 30}).calculation
        assert first is not None and second is not None

        out = run_list(ListCalculationsInput(actor=starter_user), repo=saved_repo)
        assert [c.id for c in out.calculations] == [second.id, first.id]

    def test_list_by_date_inclusive(self, save, starter_user, saved_repo, clock) -> None:
        t0 = clock.now_utc()
        save(starter_user)
        clock.advance(days=1)
        save(starter_user)
        clock.advance(days=1)
        save(starter_user)

        out = run_list_by_date(
            ListByDateInput(actor=starter_user, start=t0, end=t0 + timedelta(days=1)),
            repo=saved_repo,
        )
        assert len(out.calculations) == 2

        only_start = run_list_by_date(
            ListByDateInput(actor=starter_user, start=t0 + timedelta(days=2)), repo=saved_repo
        )
        assert len(only_start.calculations) == 1

    def test_lists_are_per_user(self, save, starter_user, admin_user, saved_repo) -> None:
        save(starter_user)
        save(admin_user)
        out = run_list(ListCalculationsInput(actor=starter_user), repo=saved_repo)
        assert [c.user_id for c in out.calculations] == [starter_user.id]

    def test_delete_own(self, save, starter_user, saved_repo) -> None:
        calc = save(starter_user).calculation
        assert calc is not None
        out = run_delete(
            DeleteCalculationInput(actor=starter_user, calculation_id=calc.id), repo=saved_repo
        )
        assert out.success
        assert saved_repo.get(calc.id) is None

    def test_delete_other_users_refused(self, save, starter_user, admin_user, saved_repo) -> None:
        calc = save(starter_user).calculation
        assert calc is not None
        out = run_delete(
            DeleteCalculationInput(actor=admin_user, calculation_id=calc.id), repo=saved_repo
        )
        assert out.error is not None
        assert out.error.message == MSG_NOT_OWNED
        assert saved_repo.get(calc.id) is not None

    def test_delete_unknown(self, starter_user, saved_repo) -> None:
        out = run_delete(
            DeleteCalculationInput(actor=starter_user, calculation_id=uuid4()), repo=saved_repo
        )
        assert out.error is not None and out.error.code == "not_found"

    def test_clear_all(self, save, starter_user, admin_user, saved_repo) -> None:
        save(starter_user)
        save(starter_user)
        save(admin_user)
        out = run_clear_all(ClearCalculationsInput(actor=starter_user), repo=saved_repo)
        assert out.deleted == 2
        assert len(saved_repo.list_by_user(admin_user.id)) == 1


class TestGuestMode:
    @pytest.fixture
    def session(self, guest_repo, settings_repo, clock):
        out = run_create_guest_session(
            CreateGuestSessionInput(), repo=guest_repo, settings_repo=settings_repo, time=clock
        )
        assert out.session is not None
        return out.session

    def _save(self, guest_repo, catalog, clock, session_id, calculator_id="qw", inputs=None):
        return run_save_guest_calculation(
            SaveGuestCalculationInput(
                session_id=session_id,
                calculator_id=calculator_id,
                inputs=inputs if inputs is not None else {"vw": 30, "ae": 0.02},
            ),
            repo=guest_repo,
            catalog=catalog,
            time=clock,
        )

    def test_new_session_uses_settings(self, guest_repo, settings_repo, clock) -> None:
        settings_repo.set(MAX_GUEST_CALCULATIONS, "3", clock.now_utc())
        out = run_create_guest_session(
            CreateGuestSessionInput(), repo=guest_repo, settings_repo=settings_repo, time=clock
        )
        assert out.session is not None
        assert out.session.max_calculations == 3
        assert out.session.remaining == 3
        assert guest_repo.get(out.session.id) is not None

    def test_disabled(self, guest_repo, settings_repo, clock) -> None:
        settings_repo.set(GUEST_MODE_ENABLED, "false", clock.now_utc())
        out = run_create_guest_session(
            CreateGuestSessionInput(), repo=guest_repo, settings_repo=settings_repo, time=clock
        )
        assert not out.success
        assert out.error is not None
        assert out.error.code == "forbidden"
        assert out.error.message == MSG_GUEST_DISABLED

    def test_save_counts(self, session, guest_repo, catalog, clock) -> None:
        out = self._save(guest_repo, catalog, clock, session.id)
        assert out.success
        assert out.session is not None
        assert out.session.calculation_count == 1
        assert out.calculation is not None
        assert out.calculation.result.value == pytest.approx(10.0)

    def test_limit_reached(self, guest_repo, settings_repo, catalog, clock) -> None:
        settings_repo.set(MAX_GUEST_CALCULATIONS, "2", clock.now_utc())
        session = run_create_guest_session(
            CreateGuestSessionInput(), repo=guest_repo, settings_repo=settings_repo, time=clock
        ).session
        assert session is not None

        assert self._save(guest_repo, catalog, clock, session.id).success
        assert self._save(guest_repo, catalog, clock, session.id).success
        third = self._save(guest_repo, catalog, clock, session.id)
        assert not third.success
        assert third.error is not None
        assert third.error.code == "limit_reached"
        assert third.error.message == guest_limit_message(2)
        assert guest_repo.count_calculations(session.id) == 2

    def test_all_zero_refused(self, session, guest_repo, catalog, clock) -> None:
        out = self._save(guest_repo, catalog, clock, session.id, inputs={"vw": 0})
        assert out.error is not None and out.error.code == "no_values"
        stored = guest_repo.get(session.id)
        assert stored is not None and stored.calculation_count == 0

    def test_unknown_session(self, guest_repo, catalog, clock) -> None:
        out = self._save(guest_repo, catalog, clock, "nope")
        assert out.error is not None
        assert out.error.message == MSG_SESSION_NOT_FOUND

    def test_get_touches_activity(self, session, guest_repo, clock) -> None:
        clock.advance(hours=2)
        out = run_get_guest_session(GuestSessionInput(session_id=session.id), repo=guest_repo, time=clock)
        assert out.session is not None
        assert out.session.last_activity == clock.now_utc()

    def test_list_and_clear(self, session, guest_repo, catalog, clock) -> None:
        self._save(guest_repo, catalog, clock, session.id)
        clock.advance(seconds=1)
        self._save(guest_repo, catalog, clock, session.id, "qs", {"vs": 35, "vw": 30})

        listed = run_list_guest_calculations(
            GuestSessionInput(session_id=session.id), repo=guest_repo, time=clock
        )
        assert [c.calculator_id for c in listed.calculations] == ["qs", "qw"]

        cleared = run_clear_guest_calculations(
            GuestSessionInput(session_id=session.id), repo=guest_repo, time=clock
        )
        assert cleared.session is not None
        assert cleared.session.calculation_count == 0
        assert guest_repo.list_calculations(session.id) == []

    def test_cleanup_idle_sessions(self, guest_repo, settings_repo, clock) -> None:
        stale = run_create_guest_session(
            CreateGuestSessionInput(), repo=guest_repo, settings_repo=settings_repo, time=clock
        ).session
        clock.advance(days=8)
        fresh = run_create_guest_session(
            CreateGuestSessionInput(), repo=guest_repo, settings_repo=settings_repo, time=clock
        ).session
        assert stale is not None and fresh is not None

        out = run_cleanup_guest_sessions(
            CleanupGuestSessionsInput(retention_days=7), repo=guest_repo, time=clock
        )
        assert out.deleted == 1
        assert guest_repo.get(stale.id) is None
        assert guest_repo.get(fresh.id) is not None
