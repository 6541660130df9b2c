"""Plan status transitions driven by recorded results and restarts."""
from app.models.plan import DayResult, PlanStatus


def status_after_result(current: PlanStatus, result: DayResult, win_count: int, days: int) -> PlanStatus:
    """
    Status after a day's result has been recorded.

    ``win_count`` is the number of winning entries once the new result is in.
    A loss stops the plan on any day; the plan completes when the number of
    wins reaches its duration.
    """
    current = PlanStatus(current)
    result = DayResult(result)
    if result == DayResult.LOSS:
        return PlanStatus.STOPPED
    if result == DayResult.WIN and win_count == days:
        return PlanStatus.COMPLETED
    return current


def status_after_restart(current: PlanStatus) -> PlanStatus:
    # only a stopped plan is reactivated; completed stays completed
    current = PlanStatus(current)
    if current == PlanStatus.STOPPED:
        return PlanStatus.ACTIVE
    return current
