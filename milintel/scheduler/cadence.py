"""Which analysis tiers fire at a given Eastern wall-clock minute.

    window        days      span            minute 0                 minute 30
    market        Mon-Fri   09:30-16:00     mini + deep              mini
    after_market  Mon-Fri   16:00-19:00     deep (even h) / mini (odd h)
    evening       any       19:00-06:00     deep @21,6 / mini @19,22,1,4
    pre_market    Mon-Fri   06:00-09:30     mini
    closed        weekend daytime           -

Windows are tried in the order above. ``decide`` is a pure function of
``(hour, minute, weekday)`` with Monday == 0.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional
from zoneinfo import ZoneInfo

from ..models import Tier

MARKET_OPEN = 9 * 60 + 30
MARKET_CLOSE = 16 * 60
AFTER_MARKET_CLOSE = 19 * 60
EVENING_START_HOUR = 19
EVENING_END_HOUR = 6

EVENING_DEEP_HOURS = frozenset({21, 6})
EVENING_MINI_HOURS = frozenset({19, 22, 1, 4})

_SEARCH_HORIZON = timedelta(days=8)


class Window(str, Enum):
    MARKET = "market"
    AFTER_MARKET = "after_market"
    EVENING = "evening"
    PRE_MARKET = "pre_market"
    CLOSED = "closed"


@dataclass(frozen=True)
class ScheduleDecision:
    run_mini: bool = False
    run_deep: bool = False

    @property
    def tiers(self) -> List[Tier]:
        tiers = []
        if self.run_deep:
            tiers.append(Tier.DEEP)
        if self.run_mini:
            tiers.append(Tier.MINI)
        return tiers

    def fires(self, tier: Tier) -> bool:
        return self.run_mini if tier is Tier.MINI else self.run_deep


def _check(hour: int, minute: int, weekday: int) -> None:
    if not 0 <= hour <= 23:
        raise ValueError(f"hour out of range: {hour}")
    if not 0 <= minute <= 59:
        raise ValueError(f"minute out of range: {minute}")
    if not 0 <= weekday <= 6:
        raise ValueError(f"weekday out of range: {weekday}")


def window_for(hour: int, minute: int, weekday: int) -> Window:
    _check(hour, minute, weekday)
    weekday_session = weekday < 5
    t = hour * 60 + minute

    if weekday_session and MARKET_OPEN <= t < MARKET_CLOSE:
        return Window.MARKET
    if weekday_session and MARKET_CLOSE <= t < AFTER_MARKET_CLOSE:
        return Window.AFTER_MARKET
    if hour >= EVENING_START_HOUR or hour < EVENING_END_HOUR:
        return Window.EVENING
    if weekday_session and t < MARKET_OPEN:
        return Window.PRE_MARKET
    return Window.CLOSED


def decide(hour: int, minute: int, weekday: int) -> ScheduleDecision:
    window = window_for(hour, minute, weekday)

    if window is Window.MARKET:
        return ScheduleDecision(run_mini=minute in (0, 30), run_deep=minute == 0)

    if minute != 0:
        return ScheduleDecision()

    if window is Window.AFTER_MARKET:
        even = hour % 2 == 0
        return ScheduleDecision(run_mini=not even, run_deep=even)
    if window is Window.EVENING:
        return ScheduleDecision(
            run_mini=hour in EVENING_MINI_HOURS,
            run_deep=hour in EVENING_DEEP_HOURS,
        )
    if window is Window.PRE_MARKET:
        return ScheduleDecision(run_mini=True)
    return ScheduleDecision()


def decide_at(moment: datetime, tz: ZoneInfo) -> ScheduleDecision:
    local = moment.astimezone(tz)
    return decide(local.hour, local.minute, local.weekday())


def next_run(after: datetime, tier: Tier, tz: ZoneInfo) -> Optional[datetime]:
    """First whole minute strictly after ``after`` at which ``tier`` fires.

    Returned in UTC; None if nothing fires within eight days.
    """
    if after.tzinfo is None:
        after = after.replace(tzinfo=timezone.utc)
    candidate = after.astimezone(timezone.utc).replace(second=0, microsecond=0)
    end = candidate + _SEARCH_HORIZON
    step = timedelta(minutes=1)

    candidate += step
    while candidate <= end:
        local = candidate.astimezone(tz)
        if local.minute in (0, 30) and decide(local.hour, local.minute, local.weekday()).fires(tier):
            return candidate
        candidate += step
    return None
