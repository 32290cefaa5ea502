# src/Tierbot/store.py
from __future__ import annotations

from typing import Protocol

import structlog
from sqlalchemy.exc import SQLAlchemyError

from Tierbot import repos
from Tierbot.db import session_scope
from Tierbot.errors import UpstreamError
from Tierbot.ranking import Ranking

log = structlog.get_logger()


class RankingStore(Protocol):
    async def upsert(self, ranking: Ranking) -> None: ...


class SqlRankingStore:
    """RankingStore backed by the app database."""

    async def upsert(self, ranking: Ranking) -> None:
        try:
            async with session_scope() as s:
                row = await repos.upsert_player_ranking(s, ranking)
        except (SQLAlchemyError, OSError) as err:
            # Driver-level connection failures (e.g. refused socket) surface as OSError
            raise UpstreamError(f"ranking upsert failed: {err}") from err
        log.info(
            "ranking.store.upserted",
            username=row.username,
            tier=row.tier,
            overall_score=row.overall_score,
        )
