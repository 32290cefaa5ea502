# discord_schemas.py

from enum import IntEnum
from typing import Any, Literal

from pydantic import BaseModel, Field

EPHEMERAL_FLAG = 64


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4


class User(BaseModel):
    id: str | None = None
    username: str | None = None
    global_name: str | None = None


class Member(BaseModel):
    user: User | None = None
    nick: str | None = None


class CommandOption(BaseModel):
    name: str
    type: int | None = None
    value: Any = None


class InteractionData(BaseModel):
    id: str | None = None
    name: str | None = None
    type: int | None = None
    options: list[CommandOption] = Field(default_factory=list)


class Interaction(BaseModel):
    # Only `type` is mandatory: a PING must be acknowledged whatever else it carries
    type: int
    id: str | None = None
    token: str | None = None
    application_id: str | None = None
    data: InteractionData | None = None
    guild_id: str | None = None
    channel_id: str | None = None
    member: Member | None = None
    user: User | None = None

    def invoking_user(self) -> User | None:
        # Guild invocations carry member.user; DMs carry user
        if self.member is not None and self.member.user is not None:
            return self.member.user
        return self.user

    def options_dict(self) -> dict[str, Any]:
        if self.data is None:
            return {}
        return {o.name: o.value for o in self.data.options}


class PongResponse(BaseModel):
    type: Literal[1] = 1


class MessageData(BaseModel):
    content: str
    flags: int | None = None


class MessageResponse(BaseModel):
    type: Literal[4] = 4  # CHANNEL_MESSAGE_WITH_SOURCE
    data: MessageData


InteractionResponse = PongResponse | MessageResponse


def message(content: str, *, ephemeral: bool = False) -> MessageResponse:
    return MessageResponse(
        data=MessageData(content=content, flags=EPHEMERAL_FLAG if ephemeral else None)
    )


def dump_response(resp: InteractionResponse) -> dict[str, Any]:
    return resp.model_dump(exclude_none=True)
