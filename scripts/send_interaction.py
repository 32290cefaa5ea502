#!/usr/bin/env python3
"""
Send a signed interaction to a running Tierbot instance, the way Discord would.

Sign with the private half of the key pair from `scripts/generate_keys.py`
(TIERBOT_SIGNING_KEY) while the server runs with the matching
DISCORD_PUBLIC_KEY.

Examples:
  python scripts/send_interaction.py --ping
  python scripts/send_interaction.py ping
  python scripts/send_interaction.py addrank -o username=Alice -o playstyle=100 \
      -o movement=100 -o pvp=100 -o building=100 -o projectiles=100
"""

from __future__ import annotations

import asyncio
import json
import os
import sys
import time
from pathlib import Path

import click
import httpx
import nacl.encoding
import nacl.signing
from dotenv import load_dotenv

project_root = Path(__file__).parent.parent
env_local = project_root / ".env.local"
load_dotenv(dotenv_path=env_local if env_local.exists() else project_root / ".env")


def _coerce(value: str):
    try:
        return int(value)
    except ValueError:
        return value


def _build_body(command: str | None, options: tuple[str, ...]) -> bytes:
    if command is None:
        return b'{"type":1}'
    opts = []
    for item in options:
        name, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected name=value, got {item!r}", param_hint="--option")
        opts.append({"name": name, "value": _coerce(value)})
    payload = {
        "id": "2",
        "type": 2,
        "token": "fake-token",
        "application_id": os.environ.get("DISCORD_APPLICATION_ID", "0"),
        "data": {"id": "1", "name": command, "type": 1, "options": opts},
        "guild_id": "1",
        "channel_id": "1",
        "member": {"user": {"id": "1", "username": "cli_user"}},
    }
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


async def _send(url: str, body: bytes, key: nacl.signing.SigningKey) -> httpx.Response:
    timestamp = str(int(time.time()))
    signed = key.sign(timestamp.encode() + body)
    headers = {
        "X-Signature-Ed25519": signed.signature.hex(),
        "X-Signature-Timestamp": timestamp,
        "Content-Type": "application/json",
    }
    async with httpx.AsyncClient(timeout=10) as client:
        return await client.post(url, content=body, headers=headers)


@click.command()
@click.argument("command", required=False)
@click.option("-o", "--option", "options", multiple=True, help="Command option as name=value.")
@click.option("--ping", is_flag=True, help="Send a PING interaction instead of a command.")
@click.option("--url", default=lambda: f"http://127.0.0.1:{os.environ.get('APP_PORT', '18000')}/")
def main(command: str | None, options: tuple[str, ...], ping: bool, url: str) -> None:
    key_hex = os.environ.get("TIERBOT_SIGNING_KEY")
    if not key_hex:
        click.echo(click.style("TIERBOT_SIGNING_KEY is not set; run scripts/generate_keys.py", fg="red"))
        sys.exit(1)
    key = nacl.signing.SigningKey(key_hex, encoder=nacl.encoding.HexEncoder)
    if not ping and command is None:
        raise click.UsageError("give a COMMAND or --ping")

    body = _build_body(None if ping else command, options)
    click.echo(f"-> POST {url} ({'ping' if ping else command})")
    response = asyncio.run(_send(url, body, key))
    color = "red" if response.status_code >= 400 else "green"
    click.echo(click.style(f"<- HTTP {response.status_code}", fg=color))
    try:
        click.echo(json.dumps(response.json(), indent=2, ensure_ascii=False))
    except ValueError:
        click.echo(response.text)


if __name__ == "__main__":
    main()
