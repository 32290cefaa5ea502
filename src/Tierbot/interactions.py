# src/Tierbot/interactions.py
"""Classify a verified interaction and produce its response."""

from __future__ import annotations

import enum
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from Tierbot.commanding import Invocation, route
from Tierbot.config import Settings
from Tierbot.discord_schemas import (
    Interaction,
    InteractionResponse,
    InteractionType,
    PongResponse,
    message,
)
from Tierbot.errors import ProtocolError
from Tierbot.metrics import inc_counter
from Tierbot.store import RankingStore

log = structlog.get_logger()


class InteractionKind(enum.Enum):
    PING = "ping"
    APPLICATION_COMMAND = "application_command"
    UNSUPPORTED = "unsupported"


def parse_interaction(payload: Any) -> Interaction:
    """Turn decoded JSON into an Interaction or raise ProtocolError."""
    if not isinstance(payload, dict):
        raise ProtocolError("interaction payload must be a JSON object")
    raw_type = payload.get("type")
    if type(raw_type) is int and raw_type == InteractionType.PING:
        # A PING is acknowledged whatever shape the rest of the body has
        return Interaction(type=InteractionType.PING)
    try:
        return Interaction.model_validate(payload)
    except PydanticValidationError as err:
        raise ProtocolError(f"invalid interaction payload: {err.error_count()} error(s)") from err


def classify(inter: Interaction) -> InteractionKind:
    if inter.type == InteractionType.PING:
        return InteractionKind.PING
    if (
        inter.type == InteractionType.APPLICATION_COMMAND
        and inter.data is not None
        and inter.data.name
    ):
        return InteractionKind.APPLICATION_COMMAND
    return InteractionKind.UNSUPPORTED


async def handle_interaction(
    inter: Interaction, *, settings: Settings, store: RankingStore
) -> InteractionResponse:
    kind = classify(inter)
    if kind is InteractionKind.PING:
        log.info("discord.ping")
        return PongResponse()

    if kind is InteractionKind.UNSUPPORTED:
        inc_counter("interactions.unsupported")
        log.warning("discord.interaction.unsupported", interaction_type=inter.type)
        return message(f"❌ Unhandled interaction type: {inter.type}", ephemeral=True)

    assert inter.data is not None and inter.data.name is not None
    user = inter.invoking_user()
    inv = Invocation(
        name=inter.data.name,
        options=inter.options_dict(),
        user_id=user.id if user else None,
        channel_id=inter.channel_id,
        guild_id=inter.guild_id,
        settings=settings,
        store=store,
    )
    log.info(
        "command.initiated",
        command_name=inv.name,
        option_names=sorted(inv.options),
        user_id=inv.user_id,
        guild_id=inv.guild_id,
    )
    return await route(inv.name, inv)
