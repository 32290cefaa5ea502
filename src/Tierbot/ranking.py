# src/Tierbot/ranking.py
"""Score averaging and tier assignment for player rankings.

A ranking is five equally weighted scores in [1, 100]. The overall score is
their arithmetic mean and the tier comes from a single descending threshold
table; both are derived on access so they can never drift from the scores.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

SCORE_MIN = 1
SCORE_MAX = 100

# Declaration order is display order
SCORE_FIELDS: tuple[str, ...] = ("playstyle", "movement", "pvp", "building", "projectiles")

SCORE_LABELS: dict[str, str] = {
    "playstyle": "Playstyle",
    "movement": "Movement",
    "pvp": "PvP",
    "building": "Building",
    "projectiles": "Projectiles",
}


@dataclass(frozen=True)
class TierBand:
    threshold: float
    name: str
    emoji: str


# Highest threshold first; first match wins
TIER_BANDS: tuple[TierBand, ...] = (
    TierBand(97, "HT1", "🏆"),
    TierBand(93, "MT1", "🏆"),
    TierBand(89, "LT1", "🏆"),
    TierBand(84, "HT2", "💎"),
    TierBand(80, "MT2", "💎"),
    TierBand(76, "LT2", "💎"),
    TierBand(71, "HT3", "🥇"),
    TierBand(67, "MT3", "🥇"),
    TierBand(63, "LT3", "🥇"),
    TierBand(58, "HT4", "🥈"),
    TierBand(54, "MT4", "🥈"),
    TierBand(50, "LT4", "🥈"),
)

NO_RANK = TierBand(float("-inf"), "No Rank", "❔")


def assign_tier(overall: float) -> TierBand:
    for band in TIER_BANDS:
        if overall >= band.threshold:
            return band
    return NO_RANK


def tier_band(name: str) -> TierBand:
    """Look up a band by tier name (e.g. for rendering a stored row)."""
    for band in TIER_BANDS:
        if band.name == name:
            return band
    return NO_RANK


@dataclass(frozen=True)
class Scores:
    playstyle: int
    movement: int
    pvp: int
    building: int
    projectiles: int

    def __post_init__(self) -> None:
        for name in SCORE_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an integer")
            if not SCORE_MIN <= value <= SCORE_MAX:
                raise ValueError(f"{name} must be between {SCORE_MIN} and {SCORE_MAX}")

    def values(self) -> tuple[int, ...]:
        return tuple(getattr(self, name) for name in SCORE_FIELDS)

    @property
    def overall(self) -> float:
        vals = self.values()
        return sum(vals) / len(vals)


@dataclass(frozen=True)
class Ranking:
    username: str
    scores: Scores
    updated_at: datetime

    @classmethod
    def now(cls, username: str, scores: Scores) -> Ranking:
        return cls(username=username, scores=scores, updated_at=datetime.now(timezone.utc))

    @property
    def overall_score(self) -> float:
        return self.scores.overall

    @property
    def tier(self) -> TierBand:
        return assign_tier(self.overall_score)


def format_summary(ranking: Ranking) -> str:
    band = ranking.tier
    parts = " · ".join(
        f"{SCORE_LABELS[name]} {getattr(ranking.scores, name)}" for name in SCORE_FIELDS
    )
    return (
        f"{band.emoji} **{ranking.username}** is now ranked **{band.name}**\n"
        f"Overall: **{ranking.overall_score:.1f}**\n"
        f"{parts}"
    )
