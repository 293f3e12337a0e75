"""
Matching, fan-out, archival and scoring engine.

Responsibilities:
- Match new reservations against standing notification requests (and back).
- Fan out hot-reservation alerts to users by star tier.
- Move expired reservations and requests into history.
- Recompute crowd-sourced hotness per restaurant/day/slot from reviews.
- Aggregate daily popularity statistics from archived reservations.
"""
from .archive import Archiver
from .hotness import HotnessCalculator
from .maintenance import UserMaintenance
from .matching import MatchEngine, matches
from .stats import StatsAggregator, popularity_report
from .tiers import TieredNotifier, tier_for

__all__ = [
    "Archiver",
    "HotnessCalculator",
    "MatchEngine",
    "StatsAggregator",
    "TieredNotifier",
    "UserMaintenance",
    "matches",
    "popularity_report",
    "tier_for",
]
