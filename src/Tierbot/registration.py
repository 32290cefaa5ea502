# src/Tierbot/registration.py
"""Declare Tierbot's slash commands to Discord.

Runs outside the interaction path (the /register-commands route and
scripts/register_commands.py). Discord treats a POST for an existing command
name as an overwrite, so registering twice is safe.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import orjson
import structlog
from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo

from Tierbot.command_loader import load_all_commands
from Tierbot.commanding import Command, all_commands
from Tierbot.errors import UpstreamError
from Tierbot.metrics import inc_counter

log = structlog.get_logger()

DISCORD_API_BASE = "https://discord.com/api/v10"

# Discord API constants
CMD_CHAT_INPUT = 1
OPT_STRING = 3
OPT_INTEGER = 4
OPT_BOOLEAN = 5
OPT_NUMBER = 10


class OptionSpec(BaseModel):
    name: str
    description: str
    type: int
    required: bool = False
    min_value: int | float | None = None
    max_value: int | float | None = None
    min_length: int | None = None
    max_length: int | None = None


class CommandSpec(BaseModel):
    name: str
    description: str
    type: int = CMD_CHAT_INPUT
    options: list[OptionSpec] = Field(default_factory=list)

    def payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class RegistrationResult(BaseModel):
    application_id: str
    commands: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [str(c.get("name")) for c in self.commands]


def _constraints(f: FieldInfo) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for m in f.metadata:
        for attr, key in (
            ("ge", "min_value"),
            ("le", "max_value"),
            ("min_length", "min_length"),
            ("max_length", "max_length"),
        ):
            val = getattr(m, attr, None)
            if val is not None:
                out[key] = val
    return out


def _option_spec(field_name: str, f: FieldInfo) -> OptionSpec:
    # Map Pydantic annotations to Discord option types
    ann = f.annotation
    if ann in (int,):
        t = OPT_INTEGER
    elif ann in (float,):
        t = OPT_NUMBER
    elif ann in (bool,):
        t = OPT_BOOLEAN
    else:
        t = OPT_STRING
    cons = _constraints(f)
    if t == OPT_STRING:
        cons.pop("min_value", None)
        cons.pop("max_value", None)
    else:
        cons.pop("min_length", None)
        cons.pop("max_length", None)
    desc = (f.description or "").strip()
    return OptionSpec(
        name=field_name,
        description=desc or field_name,
        type=t,
        required=f.is_required(),
        **cons,
    )


def command_spec(cmd: Command) -> CommandSpec:
    return CommandSpec(
        name=cmd.name,
        description=cmd.description,
        options=[_option_spec(n, f) for n, f in cmd.option_model.model_fields.items()],
    )


def build_command_specs(names: list[str] | None = None) -> list[CommandSpec]:
    """Specs for every registered command, or just ``names`` when given."""
    load_all_commands()
    cmds = all_commands()
    if names is not None:
        unknown = [n for n in names if n not in cmds]
        if unknown:
            raise KeyError(f"unknown command(s): {', '.join(unknown)}")
        cmds = {n: cmds[n] for n in names}
    return [command_spec(c) for c in cmds.values()]


def commands_url(application_id: str, api_base: str = DISCORD_API_BASE) -> str:
    return f"{api_base.rstrip('/')}/applications/{application_id}/commands"


async def register(
    application_id: str,
    bot_token: str,
    specs: list[CommandSpec],
    *,
    api_base: str = DISCORD_API_BASE,
    timeout: float = 10.0,
    client: httpx.AsyncClient | None = None,
) -> RegistrationResult:
    """POST each spec to Discord; raise UpstreamError on the first failure. No retries."""
    url = commands_url(application_id, api_base)
    headers = {"Authorization": f"Bot {bot_token}", "Content-Type": "application/json"}
    result = RegistrationResult(application_id=application_id)

    async def _post_all(c: httpx.AsyncClient) -> None:
        for spec in specs:
            try:
                r = await c.post(url, headers=headers, content=orjson.dumps(spec.payload()))
            except httpx.RequestError as e:
                inc_counter("registration.failed")
                log.error("discord.register.network_error", command_name=spec.name, error=str(e))
                raise UpstreamError(
                    f"Failed to register command {spec.name}: {e}", body=str(e)
                ) from e
            if r.status_code not in (200, 201):
                inc_counter("registration.failed")
                log.error(
                    "discord.register.http_error",
                    command_name=spec.name,
                    http_status_code=r.status_code,
                    text_preview=(r.text or "")[:200],
                )
                raise UpstreamError(
                    f"Failed to register command {spec.name}: {r.status_code}",
                    status_code=r.status_code,
                    body=r.text,
                )
            inc_counter("registration.succeeded")
            log.info(
                "discord.register.ok", command_name=spec.name, http_status_code=r.status_code
            )
            result.commands.append(r.json())

    try:
        async with asyncio.timeout(timeout):
            if client is not None:
                await _post_all(client)
            else:
                async with httpx.AsyncClient(timeout=timeout) as c:
                    await _post_all(c)
    except TimeoutError as e:
        inc_counter("registration.failed")
        log.error("discord.register.timeout", timeout_seconds=timeout)
        raise UpstreamError("Failed to register commands: timed out", body="timeout") from e
    return result


async def fetch_registered(
    application_id: str,
    bot_token: str,
    *,
    api_base: str = DISCORD_API_BASE,
    client: httpx.AsyncClient,
) -> list[dict[str, Any]]:
    r = await client.get(
        commands_url(application_id, api_base), headers={"Authorization": f"Bot {bot_token}"}
    )
    if r.status_code != 200:
        raise UpstreamError(
            f"Failed to list commands: {r.status_code}", status_code=r.status_code, body=r.text
        )
    return r.json()
