import logging

import discord
from discord import app_commands
from discord.ext import commands

from config import BOT_NAME

NO_MEME_MESSAGE = "😿 Couldn't find a meme this time, try again later."


def build_meme_embed(photo_link: str) -> discord.Embed:
    embed = discord.Embed(color=discord.Color.blurple())
    embed.set_image(url=photo_link)
    embed.set_footer(text=f"{BOT_NAME} | random Telegram meme")
    return embed


class TelegramMemeCommands(commands.Cog):
    """Random pictures from the configured Telegram channels"""

    def __init__(self, bot):
        self.bot = bot

    async def _random_meme(self):
        meme = await self.bot.telegram_posts.get_random_post_picture()
        if meme is None:
            logging.info("No meme found for this request")
        return meme

    @app_commands.command(name="meme", description="Post a random meme from Telegram")
    async def meme(self, interaction: discord.Interaction):
        # Several HTTP round trips, answer within the 3s interaction window first
        await interaction.response.defer(thinking=True)

        meme = await self._random_meme()
        if meme is None:
            await interaction.followup.send(NO_MEME_MESSAGE)
            return
        await interaction.followup.send(embed=build_meme_embed(meme.photo_link))

    @commands.command(name="meme")
    async def meme_prefix(self, ctx: commands.Context):
        """Post a random meme from Telegram"""
        async with ctx.typing():
            meme = await self._random_meme()
        if meme is None:
            await ctx.send(NO_MEME_MESSAGE)
            return
        await ctx.send(embed=build_meme_embed(meme.photo_link))


async def setup(bot):
    """Setup function called by discord.py when loading this cog"""
    await bot.add_cog(TelegramMemeCommands(bot))
