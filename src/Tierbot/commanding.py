# src/Tierbot/commanding.py
from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from Tierbot.discord_schemas import InteractionResponse, message
from Tierbot.errors import ValidationError
from Tierbot.metrics import inc_counter

log = structlog.get_logger()


# --- What a handler gets to see about the request ---
@dataclass
class Invocation:
    name: str
    options: dict[str, Any]
    user_id: str | None = None
    channel_id: str | None = None
    guild_id: str | None = None
    # DI: frozen settings and the ranking store
    settings: Any | None = None
    store: Any | None = None


@dataclass(frozen=True)
class Reply:
    content: str
    ephemeral: bool = False

    def to_response(self) -> InteractionResponse:
        return message(self.content, ephemeral=self.ephemeral)


# --- Option models: declared types, bounds and required flags per command ---
class Option(BaseModel):
    """Base for command options; extend per command."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


OptionT = TypeVar("OptionT", bound=Option)

_MISSING_TYPES = {"missing", "string_too_short"}


def decode_options(model: type[OptionT], options: dict[str, Any]) -> OptionT:
    """Validate raw option values against ``model``.

    Raises ValidationError for the first failing field in declaration order.
    Null values and blank strings count as missing.
    """
    try:
        return model.model_validate(options)
    except PydanticValidationError as err:
        errors = err.errors()
    by_field: dict[str, dict[str, Any]] = {}
    for e in errors:
        loc = e.get("loc") or ("",)
        by_field.setdefault(str(loc[0]), e)
    for name in model.model_fields:
        e = by_field.get(name)
        if e is None:
            continue
        absent = options.get(name) is None or e.get("type") in _MISSING_TYPES
        kind = "missing" if absent else "invalid"
        raise ValidationError(name, f"{name}: {e.get('msg')}", kind=kind)
    # An error outside any declared field (e.g. a model-level validator)
    first = errors[0]
    raise ValidationError(str((first.get("loc") or ("",))[0]), str(first.get("msg")))


# --- Command descriptor ---
Handler = Callable[[Invocation, Any], Awaitable[Reply]]
ErrorRenderer = Callable[[ValidationError], str]


def _default_error(err: ValidationError) -> str:
    return f"❌ Invalid option `{err.field}`."


@dataclass
class Command:
    name: str
    description: str
    option_model: type[Option]
    handler: Handler
    on_invalid: ErrorRenderer = _default_error
    metadata: dict[str, Any] = field(default_factory=dict)

    async def run(self, inv: Invocation) -> Reply:
        """Decode this command's options, then call its handler."""
        try:
            opts = decode_options(self.option_model, inv.options)
        except ValidationError as err:
            inc_counter(f"command.{self.name}.validation_failed")
            log.info(
                "command.options_invalid",
                command_name=self.name,
                field=err.field,
                kind=err.kind,
            )
            return Reply(self.on_invalid(err), ephemeral=True)
        return await self.handler(inv, opts)


# --- Static registry (populated by decorator) ---
_REGISTRY: dict[str, Command] = {}


def slash_command(
    name: str,
    description: str,
    option_model: type[Option] = Option,
    on_invalid: ErrorRenderer | None = None,
    **metadata: Any,
):
    def wrap(func: Handler):
        _REGISTRY[name] = Command(
            name, description, option_model, func, on_invalid or _default_error, metadata
        )
        return func

    return wrap


def all_commands() -> dict[str, Command]:
    return dict(_REGISTRY)


def find_command(name: str) -> Command | None:
    # Exact, case sensitive
    return _REGISTRY.get(name)


async def route(name: str, inv: Invocation) -> InteractionResponse:
    cmd = find_command(name)
    if cmd is None:
        inc_counter("command.unknown")
        log.info("command.unknown", command_name=name)
        return Reply(f"❌ Unknown command: {name}", ephemeral=True).to_response()
    inc_counter(f"command.{name}.invoked")
    reply = await cmd.run(inv)
    return reply.to_response()
