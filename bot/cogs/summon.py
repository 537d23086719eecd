from typing import Literal

import discord
from discord import app_commands
from discord.ext import commands

from app.core.enums import HeroRarity
from app.services.banner import BannerService
from app.services.elemental import get_elemental_rotation
from app.services.mythic import MythicService
from app.services.player import PlayerService
from app.services.summon import SummonService
from app.services.wishlist import WishlistService
from bot.main import SummonBot
from bot.types import Interaction
from bot.utils.db import get_session

RARITY_COLORS: dict[HeroRarity, discord.Color] = {
    HeroRarity.COMMON: discord.Color.light_grey(),
    HeroRarity.RARE: discord.Color.blue(),
    HeroRarity.EPIC: discord.Color.purple(),
    HeroRarity.LEGENDARY: discord.Color.gold(),
    HeroRarity.MYTHIC: discord.Color.red(),
}


class SummonCog(commands.Cog):
    def __init__(self, bot: SummonBot) -> None:
        self.bot = bot

    @app_commands.command(name="summon", description="進行英雄召喚")
    @app_commands.rename(banner_id="卡池", count="召喚類型")
    @app_commands.choices(
        count=[
            app_commands.Choice(name="單抽", value=1),
            app_commands.Choice(name="十連抽", value=10),
        ]
    )
    async def summon(self, i: Interaction, banner_id: str, count: Literal[1, 10]) -> None:
        await i.response.defer()

        async with get_session() as session:
            player = await PlayerService(session).get_player(i.user.id)
            assert player is not None

            service = SummonService(session, get_elemental_rotation())
            result = await service.pull(player.id, player.server_id, banner_id, count)

        best = max((pull.rarity for pull in result.pulls), key=lambda rarity: rarity.rank)
        embed = discord.Embed(
            title=f"召喚結果 - {banner_id}",
            description=(
                f"剩餘鑽石: {result.remaining_gems} | 剩餘召喚券: {result.remaining_tickets}\n"
                f"神話卷軸: {result.mythic.scrolls_available}"
            ),
            color=RARITY_COLORS[best],
        )
        for idx, pull in enumerate(result.pulls, start=1):
            tags = []
            if pull.is_wishlist_pity:
                tags.append("願望保底")
            elif pull.is_pity_triggered:
                tags.append("保底")
            if pull.is_focus_hero:
                tags.append("主打")
            tags.append("NEW" if pull.is_new else f"碎片 +{pull.fragments_gained}")
            embed.add_field(
                name=f"召喚 {idx}",
                value=f"{pull.hero_name} ({pull.rarity}) [{', '.join(tags)}]",
                inline=False,
            )

        if result.scrolls_granted:
            embed.add_field(
                name="獲得神話卷軸", value=f"+{result.scrolls_granted}", inline=False
            )
        if result.pity is not None:
            embed.set_footer(text=f"距離傳說保底還有 {result.pity.legendary_pity_in} 抽")
        else:
            embed.set_footer(text=f"距離神話保底還有 {result.mythic.pulls_until_mythic_pity} 抽")

        await i.followup.send(embed=embed)

    @app_commands.command(name="summon_pity", description="查看卡池的當前保底進度")
    @app_commands.rename(banner_id="卡池")
    async def summon_pity(self, i: Interaction, banner_id: str) -> None:
        async with get_session() as session:
            banner = await BannerService(session).get_banner(banner_id)
            if not banner:
                await i.response.send_message("找不到指定的卡池。", ephemeral=True)
                return

            service = SummonService(session, get_elemental_rotation())
            pity = await service.get_pity_status(i.user.id, banner.id)

        lines = [
            f"傳說保底: {pity.pulls_since_legendary} / {pity.legendary_pity}",
            f"保底群組: {pity.pity_group}",
        ]
        if pity.epic_pity:
            lines.insert(1, f"史詩保底: {pity.pulls_since_epic} / {pity.epic_pity}")

        embed = discord.Embed(
            title=f"{banner.name} - 保底進度",
            description="\n".join(lines),
            color=discord.Color.green(),
        )
        await i.response.send_message(embed=embed)

    @app_commands.command(name="mythic", description="查看神話卷軸與神話保底進度")
    async def mythic(self, i: Interaction) -> None:
        async with get_session() as session:
            player = await PlayerService(session).get_player(i.user.id)
            assert player is not None
            status = await MythicService(session).get_mythic_status(player.id, player.server_id)

        embed = discord.Embed(
            title="神話召喚",
            description=(
                f"神話卷軸: {status.scrolls_available}\n"
                f"融合召喚: {status.fused_pull_counter} / {status.pulls_per_scroll}"
                f" (還需 {status.pulls_until_next_scroll} 抽)\n"
                f"神話保底: {status.mythic_pulls_since_last} / {status.mythic_pity_threshold}"
            ),
            color=RARITY_COLORS[HeroRarity.MYTHIC],
        )
        await i.response.send_message(embed=embed)

    @app_commands.command(name="wishlist", description="查看你的願望清單與願望保底進度")
    async def wishlist(self, i: Interaction) -> None:
        async with get_session() as session:
            player = await PlayerService(session).get_player(i.user.id)
            assert player is not None
            status = await WishlistService(session).get_status(player.id, player.server_id)

        heroes = "\n".join(f"- {hero.hero_name}" for hero in status.heroes) or "尚未設定"
        embed = discord.Embed(
            title="願望清單",
            description=(
                f"{heroes}\n\n"
                f"願望保底: {status.pity_counter} / {status.pity_threshold}"
                f" (還需 {status.pulls_until_pity} 抽)"
            ),
            color=RARITY_COLORS[HeroRarity.LEGENDARY],
        )
        await i.response.send_message(embed=embed)

    @app_commands.command(name="my_heroes", description="列出你擁有的英雄")
    @app_commands.rename(rarity="稀有度")
    async def my_heroes(self, i: Interaction, rarity: HeroRarity | None = None) -> None:
        async with get_session() as session:
            roster = await PlayerService(session).get_roster(i.user.id)

        if rarity is not None:
            roster = [entry for entry in roster if entry.rarity == rarity]
        if not roster:
            await i.response.send_message(
                "你目前沒有擁有任何英雄或是沒有符合條件的英雄。", ephemeral=True
            )
            return

        embed = discord.Embed(title="我的英雄", color=discord.Color.blue())
        # Discord caps embeds at 25 fields
        for entry in roster[:25]:
            embed.add_field(
                name=f"{entry.hero_name} ({entry.rarity})",
                value=f"等級 {entry.level} | {entry.stars} 星 | 碎片 {entry.fragments}",
            )
        if len(roster) > 25:  # noqa: PLR2004
            embed.set_footer(text=f"僅顯示前 25 位，共 {len(roster)} 位英雄")

        await i.response.send_message(embed=embed)

    @summon.autocomplete("banner_id")
    @summon_pity.autocomplete("banner_id")
    async def banner_autocomplete(
        self, i: Interaction, current: str
    ) -> list[app_commands.Choice[str]]:
        async with get_session() as session:
            player = await PlayerService(session).get_player(i.user.id)
            server_id = player.server_id if player else "S1"
            banners = await BannerService(session).get_active_banners(server_id)
            choices = [app_commands.Choice(name=banner.name, value=banner.id) for banner in banners]
            return [choice for choice in choices if current.lower() in choice.name.lower()][:25]


async def setup(bot: SummonBot) -> None:
    await bot.add_cog(SummonCog(bot))
