import discord

from bot.main import SummonBot

Interaction = discord.Interaction[SummonBot]
