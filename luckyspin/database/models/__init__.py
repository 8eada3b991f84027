from .restaurant import Restaurant, Prize
from .spin import Spin
from .counters import DailyPrizeCounter, DailyRestaurantCounter
from .analytics import AnalyticsEvent, AnalyticsEventType

__all__ = [
    "Restaurant",
    "Prize",
    "Spin",
    "DailyPrizeCounter",
    "DailyRestaurantCounter",
    "AnalyticsEvent",
    "AnalyticsEventType",
]
