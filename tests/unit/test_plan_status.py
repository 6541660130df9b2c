import pytest

from app.engine.plan_status import status_after_restart, status_after_result
from app.models.plan import DayResult, PlanStatus


@pytest.mark.parametrize("win_count", [0, 1, 2])
def test_loss_stops_plan_on_any_day(win_count):
    assert status_after_result(PlanStatus.ACTIVE, DayResult.LOSS, win_count, 3) == PlanStatus.STOPPED


def test_win_before_last_day_keeps_status():
    assert status_after_result(PlanStatus.ACTIVE, DayResult.WIN, 2, 3) == PlanStatus.ACTIVE


def test_all_wins_complete_plan():
    assert status_after_result(PlanStatus.ACTIVE, DayResult.WIN, 3, 3) == PlanStatus.COMPLETED


def test_accepts_raw_string_values():
    assert status_after_result("active", "win", 1, 1) == PlanStatus.COMPLETED


def test_restart_reactivates_stopped_plan():
    assert status_after_restart(PlanStatus.STOPPED) == PlanStatus.ACTIVE


@pytest.mark.parametrize("status", [PlanStatus.ACTIVE, PlanStatus.COMPLETED])
def test_restart_leaves_other_statuses(status):
    assert status_after_restart(status) == status
