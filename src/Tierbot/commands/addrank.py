# src/Tierbot/commands/addrank.py
import asyncio

import structlog
from pydantic import Field, field_validator

from Tierbot.commanding import Invocation, Option, Reply, slash_command
from Tierbot.errors import ValidationError
from Tierbot.metrics import inc_counter
from Tierbot.ranking import SCORE_MAX, SCORE_MIN, Ranking, Scores, format_summary

log = structlog.get_logger()

_DEFAULT_STORE_TIMEOUT = 2.5


def _score(label: str):
    return Field(ge=SCORE_MIN, le=SCORE_MAX, description=f"{label} score ({SCORE_MIN}-{SCORE_MAX})")


class AddRankOpts(Option):
    # Field order is validation order: the username is checked before any score
    username: str = Field(min_length=1, max_length=64, description="Player username")
    playstyle: int = _score("Playstyle")
    movement: int = _score("Movement")
    pvp: int = _score("PvP")
    building: int = _score("Building")
    projectiles: int = _score("Projectiles")

    @field_validator("playstyle", "movement", "pvp", "building", "projectiles", mode="before")
    @classmethod
    def _no_booleans(cls, v):
        # bool is an int subclass; lax mode would otherwise store true as 1
        if isinstance(v, bool):
            raise ValueError("must be a whole number")
        return v


def _render_invalid(err: ValidationError) -> str:
    if err.field == "username":
        if err.kind == "missing":
            return "❌ A username is required."
        return "❌ `username` must be between 1 and 64 characters."
    if err.kind == "missing":
        return (
            f"❌ `{err.field}` is required: all five scores must be whole numbers "
            f"between {SCORE_MIN} and {SCORE_MAX}."
        )
    return f"❌ `{err.field}` must be a whole number between {SCORE_MIN} and {SCORE_MAX}."


@slash_command(
    name="addrank",
    description="Record a player's ranking from five scores.",
    option_model=AddRankOpts,
    on_invalid=_render_invalid,
)
async def addrank(inv: Invocation, opts: AddRankOpts) -> Reply:
    ranking = Ranking.now(
        opts.username,
        Scores(
            playstyle=opts.playstyle,
            movement=opts.movement,
            pvp=opts.pvp,
            building=opts.building,
            projectiles=opts.projectiles,
        ),
    )
    timeout = getattr(inv.settings, "store_timeout_seconds", None) or _DEFAULT_STORE_TIMEOUT
    try:
        async with asyncio.timeout(timeout):
            await inv.store.upsert(ranking)
    except Exception as err:
        # Any store failure gets the same generic reply; details go to the log only
        inc_counter("addrank.store_failed")
        log.error(
            "ranking.store.error",
            username=ranking.username,
            timeout_seconds=timeout,
            error=str(err) or type(err).__name__,
            exc_info=True,
        )
        return Reply("❌ Failed to save the ranking. Please try again later.", ephemeral=True)

    inc_counter("addrank.saved")
    log.info(
        "ranking.recorded",
        username=ranking.username,
        overall_score=ranking.overall_score,
        tier=ranking.tier.name,
        user_id=inv.user_id,
    )
    return Reply(format_summary(ranking))
