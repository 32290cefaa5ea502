# src/Tierbot/commands/ping.py
from Tierbot.commanding import Invocation, Option, Reply, slash_command


@slash_command(
    name="ping",
    description="Simple ping command to test the bot",
)
async def ping(inv: Invocation, opts: Option) -> Reply:
    return Reply("🏓 Pong! The bot is working!")
