# repos.py

from __future__ import annotations

from typing import Any

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from Tierbot import models
from Tierbot.ranking import SCORE_FIELDS, Ranking


def _ranking_row(ranking: Ranking) -> dict[str, Any]:
    row: dict[str, Any] = {name: getattr(ranking.scores, name) for name in SCORE_FIELDS}
    row.update(
        username=ranking.username,
        overall_score=ranking.overall_score,
        tier=ranking.tier.name,
        updated_at=ranking.updated_at,
    )
    return row


def _insert_for(s: AsyncSession):
    dialect = s.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"upsert not supported for dialect {dialect!r}")


async def upsert_player_ranking(s: AsyncSession, ranking: Ranking) -> models.PlayerRanking:
    """Insert or overwrite the row for ``ranking.username`` in one statement.

    Concurrent writers for the same username serialize on the unique index;
    the last write wins.
    """
    row = _ranking_row(ranking)
    insert = _insert_for(s)
    stmt = insert(models.PlayerRanking).values(**row)
    stmt = stmt.on_conflict_do_update(
        index_elements=["username"],
        set_={k: v for k, v in row.items() if k != "username"},
    )
    await s.execute(stmt)
    q = await s.execute(
        select(models.PlayerRanking)
        .where(models.PlayerRanking.username == ranking.username)
        .execution_options(populate_existing=True)
    )
    return q.scalar_one()


async def get_player_ranking(s: AsyncSession, username: str) -> models.PlayerRanking | None:
    q = await s.execute(
        select(models.PlayerRanking).where(models.PlayerRanking.username == username)
    )
    return q.scalar_one_or_none()


async def healthcheck(s: AsyncSession) -> None:
    await s.execute(text("SELECT 1"))
