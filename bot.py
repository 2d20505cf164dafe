import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import aiohttp
import discord
from discord import app_commands
from discord.ext import commands

from config import (
    BOT_DESCRIPTION,
    BotConfig,
    ConfigError,
    TelegramPostConfig,
    apply_properties_to_env,
)
from telegram_post import TelegramPostService

COMMANDS_DIR = Path(__file__).resolve().parent / "commands"


class MemeBot(commands.Bot):
    def __init__(self, bot_config: BotConfig, telegram_config: TelegramPostConfig, **kwargs):
        intents = kwargs.pop("intents", None) or discord.Intents.default()
        intents.message_content = True
        super().__init__(
            command_prefix=bot_config.prefix,
            intents=intents,
            description=BOT_DESCRIPTION,
            **kwargs,
        )
        self.bot_config = bot_config
        self.telegram_config = telegram_config
        self.aiohttp_session: Optional[aiohttp.ClientSession] = None
        self.telegram_posts: Optional[TelegramPostService] = None

    async def setup_hook(self):
        """Called when the bot is starting up"""
        self.aiohttp_session = aiohttp.ClientSession()
        self.telegram_posts = TelegramPostService(self.telegram_config, self.aiohttp_session)
        logging.info(
            f"Telegram channels: {', '.join(self.telegram_config.channel_names)} "
            f"(retries={self.telegram_config.max_retries}, scan={self.telegram_config.scan_count})"
        )

        self.tree.on_error = self.on_app_command_error
        await self.load_commands()
        await self.sync_commands()

    async def load_commands(self):
        """Load all command cogs from the commands directory"""
        for file in sorted(COMMANDS_DIR.glob("*.py")):
            if file.name.startswith("_"):
                continue

            cog_name = f"commands.{file.stem}"
            try:
                await self.load_extension(cog_name)
                logging.info(f"Loaded command: {file.stem}")
            except commands.ExtensionError:
                logging.exception(f"Failed to load {file.stem}")

    async def sync_commands(self):
        # Guild sync shows up immediately, global sync can take up to an hour
        guild_id = self.bot_config.guild_id
        try:
            if guild_id:
                guild = discord.Object(id=guild_id)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logging.info(f"Synced {len(synced)} command(s) to guild {guild_id}")
            else:
                synced = await self.tree.sync()
                logging.info(f"Synced {len(synced)} command(s) globally")
        except discord.Forbidden:
            logging.error("Bot doesn't have permission to sync commands, "
                          "make sure it was invited with the 'applications.commands' scope")
        except discord.HTTPException:
            logging.exception("HTTP error during command sync")

    async def close(self):
        if self.aiohttp_session:
            await self.aiohttp_session.close()
        await super().close()

    async def on_ready(self):
        logging.info(f"Logged in as {self.user} (id: {self.user.id}), in {len(self.guilds)} guild(s)")
        await self.change_presence(
            activity=discord.Activity(type=discord.ActivityType.watching, name="memes | /meme")
        )

    async def on_command_error(self, ctx, error):
        """Handle prefix command errors"""
        if isinstance(error, commands.CommandNotFound):
            return

        logging.error(f"Command error in {ctx.command}: {error}", exc_info=error)
        await ctx.send(f"An error occurred: {error}")

    async def on_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        command_name = interaction.command.name if interaction.command else "?"
        logging.error(f"Slash command error in /{command_name}: {error}", exc_info=error)
        message = f"An error occurred: {error}"
        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)


def configure_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # discord.py is very chatty at DEBUG
    logging.getLogger("discord").setLevel(logging.INFO)


async def main(argv=None):
    """Main function to run the bot"""
    argv = sys.argv[1:] if argv is None else argv
    # Optional .properties file; its keys are exported as environment variables
    if argv:
        apply_properties_to_env(argv[0])

    bot_config = BotConfig.from_env()
    configure_logging(bot_config.debug)

    if not bot_config.token:
        logging.error("DISCORD_BOT_TOKEN not found! Set it in the .env file, "
                      "a .properties file or as an environment variable.")
        return

    try:
        telegram_config = TelegramPostConfig.from_env()
    except ConfigError as e:
        logging.error(f"Invalid Telegram configuration: {e}")
        return

    bot = MemeBot(bot_config, telegram_config)
    try:
        await bot.start(bot_config.token)
    except discord.LoginFailure:
        logging.error("Invalid bot token provided!")
    finally:
        await bot.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
