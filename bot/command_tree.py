import discord
from discord import app_commands

from app.models.player import Player
from app.services.player import PlayerService
from bot.utils.db import get_session
from bot.utils.error_handler import error_handler


class CommandTree(app_commands.CommandTree):
    async def on_error(self, i: discord.Interaction, error: app_commands.AppCommandError) -> None:
        return await error_handler(i, error)

    async def interaction_check(self, i: discord.Interaction) -> bool:
        """Register first-time users as players before any command runs."""
        async with get_session() as session:
            player_service = PlayerService(session)
            if await player_service.get_player(i.user.id) is None:
                await player_service.create_player(
                    Player(id=i.user.id, name=i.user.global_name or i.user.name)
                )
        return True
