import anyio
import discord
from discord.ext import commands
from loguru import logger

from app.core.config import settings
from bot.command_tree import CommandTree


class SummonBot(commands.Bot):
    """Discord front end for summons; every command goes through the app services."""

    def __init__(self) -> None:
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=discord.Intents.default(),
            help_command=None,
            tree_cls=CommandTree,
        )

    async def _load_cogs(self) -> None:
        async for file in anyio.Path("bot/cogs").iterdir():
            if file.suffix == ".py":
                cog_name = f"bot.cogs.{file.stem}"
                await self.load_extension(cog_name)
                logger.info(f"Loaded cog: {cog_name}")

    async def setup_hook(self) -> None:
        await self._load_cogs()
        if settings.sync_commands:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} application commands")

    async def on_ready(self) -> None:
        logger.info(f"Logged in as {self.user} ({len(self.guilds)} guilds)")
