#!/usr/bin/env python3


"""
Discord Command Registration Script

Declares Tierbot's slash commands (ping, addrank) to Discord, or shows which
of them Discord already knows about.

Usage:
  python scripts/register_commands.py --status
  python scripts/register_commands.py --register [--commands ping,addrank]

Environment Variables (read from .env.local, .env or the process env):
  - DISCORD_APPLICATION_ID or DISCORD_APP_ID
  - DISCORD_BOT_TOKEN

Registering a command that already exists overwrites its schema, so running
--register twice is harmless. Failures are reported once; nothing is retried.
"""

import argparse
import asyncio
import sys
from pathlib import Path

import httpx
from dotenv import load_dotenv
from prettytable import PrettyTable

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

env_local = project_root / ".env.local"
load_dotenv(dotenv_path=env_local if env_local.exists() else project_root / ".env")

from Tierbot.config import load_settings  # noqa: E402
from Tierbot.errors import UpstreamError  # noqa: E402
from Tierbot.registration import (  # noqa: E402
    CommandSpec,
    build_command_specs,
    fetch_registered,
    register,
)


def format_options(spec: CommandSpec) -> str:
    lines = []
    for opt in spec.options:
        bounds = ""
        if opt.min_value is not None or opt.max_value is not None:
            bounds = f" [{opt.min_value}..{opt.max_value}]"
        flag = "Required" if opt.required else "Optional"
        lines.append(f"- {opt.name} ({flag}){bounds}: {opt.description}")
    return "\n".join(lines) or "No options"


def print_status(local: list[CommandSpec], registered: list[dict]) -> None:
    table = PrettyTable()
    table.field_names = ["Command Name", "Registered", "Description", "Options"]
    table.hrules = 1
    known = {rc.get("name") for rc in registered}
    for spec in local:
        table.add_row(
            [spec.name, "Yes" if spec.name in known else "No", spec.description, format_options(spec)]
        )
    print(table)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Manage Tierbot's Discord slash commands.")
    parser.add_argument("--status", action="store_true", help="Show registration status.")
    parser.add_argument("--register", action="store_true", help="Register commands.")
    parser.add_argument("--commands", help="Comma-separated list of commands to register.")
    args = parser.parse_args()

    settings = load_settings()
    missing = [m for m in settings.missing_credentials() if m != "DISCORD_PUBLIC_KEY"]
    if missing:
        print(f"Error: Missing required environment variable(s): {', '.join(missing)}")
        return 1

    names = [n.strip() for n in args.commands.split(",") if n.strip()] if args.commands else None
    try:
        local = build_command_specs(names)
    except KeyError as e:
        print(f"Error: {e}")
        return 1

    app_id = str(settings.discord_app_id)
    token = settings.bot_token()
    async with httpx.AsyncClient(timeout=settings.registration_timeout_seconds) as client:
        try:
            if args.register:
                result = await register(
                    app_id,
                    token,
                    local,
                    api_base=settings.discord_api_base,
                    timeout=settings.registration_timeout_seconds,
                    client=client,
                )
                for name in result.names:
                    print(f"Registered: {name}")
            if args.status or not args.register:
                registered = await fetch_registered(
                    app_id, token, api_base=settings.discord_api_base, client=client
                )
                print_status(local, registered)
        except UpstreamError as e:
            print(f"Error: {e}")
            if e.body:
                print(e.body)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
