"""FastAPI app entrypoint for Tierbot."""

import time
import uuid
from contextlib import asynccontextmanager

import orjson
import structlog
from fastapi import FastAPI, HTTPException, Request

from Tierbot import repos
from Tierbot.command_loader import load_all_commands
from Tierbot.config import load_settings
from Tierbot.crypto import verify_ed25519
from Tierbot.db import session_scope
from Tierbot.errors import (
    AuthenticationError,
    ConfigurationError,
    ProtocolError,
    UpstreamError,
)
from Tierbot.interactions import handle_interaction, parse_interaction
from Tierbot.logging import redact_settings, setup_logging
from Tierbot.metrics import get_counters, inc_counter
from Tierbot.registration import build_command_specs, register
from Tierbot.responder import (
    orjson_response,
    respond_interaction,
    respond_preflight,
    respond_unauthorized,
)
from Tierbot.store import RankingStore, SqlRankingStore

log = structlog.get_logger()
settings = load_settings()
setup_logging(settings)
store: RankingStore = SqlRankingStore()
load_all_commands()

DISCORD_SIG_HEADER = "X-Signature-Ed25519"
DISCORD_TS_HEADER = "X-Signature-Timestamp"


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("app.startup", config=redact_settings(settings))
    missing = settings.missing_credentials()
    if missing:
        # Keep serving so every request reports the problem as a 500
        log.error("config.missing_credentials", missing=missing)
    yield


app = FastAPI(title="Tierbot", lifespan=lifespan)


def _config_error_response():
    try:
        settings.require_credentials()
    except ConfigurationError as err:
        log.error("config.missing_credentials", missing=err.missing)
        return orjson_response(
            {"error": "Missing Discord bot credentials", "missing": err.missing},
            status_code=500,
        )
    return None


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Assign a request_id, bind it to structlog context, and measure duration."""
    from structlog.contextvars import bind_contextvars, clear_contextvars

    request_id = str(uuid.uuid4())
    start = time.perf_counter()
    bind_contextvars(request_id=request_id)
    status_code = 500
    try:
        response = await call_next(request)
        status_code = getattr(response, "status_code", 200)
        return response
    finally:
        log.info(
            "http.request.completed",
            http_path=str(request.url.path),
            http_method=request.method,
            http_status_code=status_code,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        clear_contextvars()


@app.options("/{path:path}")
async def preflight(path: str):
    return respond_preflight()


@app.get("/register-commands")
async def register_commands():
    if (err_resp := _config_error_response()) is not None:
        return err_resp
    try:
        result = await register(
            str(settings.discord_app_id),
            settings.bot_token(),
            build_command_specs(),
            api_base=settings.discord_api_base,
            timeout=settings.registration_timeout_seconds,
        )
    except UpstreamError as err:
        detail = err.status_code if err.status_code is not None else "network error"
        return orjson_response(
            {"error": f"Failed to register command: {detail}", "details": err.body},
            status_code=500,
        )
    except Exception:
        log.error("discord.register.crashed", exc_info=True)
        return orjson_response({"error": "Bot error occurred"}, status_code=500)
    log.info("discord.register.completed", commands=result.names)
    return orjson_response(
        {
            "success": True,
            "message": f"Registered {len(result.commands)} command(s): {', '.join(result.names)}",
            "command": result.commands,
        }
    )


@app.get("/healthz")
async def healthz():
    try:
        load_all_commands()
        async with session_scope() as s:
            await repos.healthcheck(s)
    except Exception as err:
        raise HTTPException(status_code=500, detail=f"unhealthy: {err}") from err
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    if not settings.metrics_endpoint_enabled:
        raise HTTPException(status_code=404, detail="metrics disabled")
    return get_counters()


def _authenticate(raw: bytes, ts: str | None, sig: str | None) -> None:
    if not verify_ed25519(settings.discord_public_key, ts, raw, sig):
        log.warning("discord.request.bad_signature", has_sig=bool(sig), has_ts=bool(ts))
        raise AuthenticationError()


# Discord posts to whatever URL is configured in the portal; accept any path
@app.post("/{path:path}")
async def interactions(request: Request, path: str):
    inc_counter("interactions.received")
    if (err_resp := _config_error_response()) is not None:
        return err_resp
    try:
        raw = await request.body()
        sig = request.headers.get(DISCORD_SIG_HEADER)
        ts = request.headers.get(DISCORD_TS_HEADER)
        log.info(
            "discord.request.received",
            http_path=str(request.url.path),
            has_sig=bool(sig),
            has_ts=bool(ts),
        )
        try:
            _authenticate(raw, ts, sig)
        except AuthenticationError:
            inc_counter("interactions.unauthorized")
            return respond_unauthorized()

        try:
            inter = parse_interaction(orjson.loads(raw))
        except (orjson.JSONDecodeError, ProtocolError) as err:
            inc_counter("interactions.bad_request")
            preview = raw[:200].decode("utf-8", errors="replace")
            log.error("discord.request.parse_error", error=str(err), raw_body_preview=preview)
            return orjson_response({"error": "invalid interaction payload"}, status_code=400)

        resp = await handle_interaction(inter, settings=settings, store=store)
        return respond_interaction(resp)
    except Exception:
        log.error("discord.request.crashed", exc_info=True)
        return orjson_response({"error": "Bot error occurred"}, status_code=500)
