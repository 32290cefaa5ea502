# tests/conftest.py

import os
from collections.abc import AsyncIterator, Callable

import nacl.signing
import orjson
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

# Deterministic key pair so signed requests can be built in tests
TEST_SIGNING_KEY = nacl.signing.SigningKey(b"\x07" * 32)
TEST_PUBLIC_KEY = TEST_SIGNING_KEY.verify_key.encode().hex()

# Point the app at test config BEFORE any Tierbot module is imported:
# settings are read once at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["TIERBOT_SQLITE_STATIC_POOL"] = "1"
os.environ["DISCORD_BOT_TOKEN"] = "test-bot-token"
os.environ["DISCORD_APPLICATION_ID"] = "123456789012345678"
os.environ["DISCORD_PUBLIC_KEY"] = TEST_PUBLIC_KEY
os.environ["LOGGING_FILE"] = "NONE"
os.environ["LOGGING_CONSOLE"] = "WARNING"

import Tierbot.db as _db  # noqa: E402

_db.DATABASE_URL = os.environ["DATABASE_URL"]
_db._engine = None
_db._sessionmaker = None
_db._schema_initialized = False

from Tierbot import models as _models  # noqa: F401,E402
from Tierbot.command_loader import load_all_commands  # noqa: E402
from Tierbot.db import Base, get_engine, get_sessionmaker  # noqa: E402
from Tierbot.metrics import reset_counters  # noqa: E402
from Tierbot.ranking import Ranking  # noqa: E402

load_all_commands()


@pytest.fixture(autouse=True)
async def _fresh_db() -> AsyncIterator[None]:
    """Give every test an empty schema on its own event loop.

    The in-memory database lives on a single StaticPool connection, so
    disposing the engine afterwards throws the whole database away.
    """
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    _db._schema_initialized = True
    try:
        yield None
    finally:
        await engine.dispose()


@pytest.fixture(autouse=True)
def _reset_metrics():
    reset_counters()
    yield


@pytest.fixture
async def db() -> AsyncIterator[AsyncSession]:
    sm = get_sessionmaker()
    async with sm() as s:
        try:
            yield s
        finally:
            await s.rollback()
            await s.close()


@pytest.fixture
def signing_key() -> nacl.signing.SigningKey:
    return TEST_SIGNING_KEY


@pytest.fixture
def sign() -> Callable[..., dict[str, str]]:
    """Build Discord-style signature headers for a raw body."""

    def _sign(body: bytes, timestamp: str = "1700000000", key=TEST_SIGNING_KEY) -> dict[str, str]:
        signed = key.sign(timestamp.encode() + body)
        return {
            "X-Signature-Ed25519": signed.signature.hex(),
            "X-Signature-Timestamp": timestamp,
            "Content-Type": "application/json",
        }

    return _sign


class SpyStore:
    def __init__(self, fail: Exception | None = None) -> None:
        self.saved: list[Ranking] = []
        self.fail = fail

    async def upsert(self, ranking: Ranking) -> None:
        if self.fail is not None:
            raise self.fail
        self.saved.append(ranking)


@pytest.fixture
def spy_store() -> SpyStore:
    return SpyStore()


def command_body(name: str, options: dict | None = None, **extra) -> bytes:
    payload = {
        "id": "1",
        "type": 2,
        "token": "interaction-token",
        "application_id": "123456789012345678",
        "guild_id": "42",
        "channel_id": "7",
        "member": {"user": {"id": "99", "username": "tester"}},
        "data": {
            "id": "555",
            "name": name,
            "type": 1,
            "options": [{"name": k, "value": v} for k, v in (options or {}).items()],
        },
    }
    payload.update(extra)
    return orjson.dumps(payload)
