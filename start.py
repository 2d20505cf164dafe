#!/usr/bin/env python3
"""
Quick start script for the Meme Bot

This script runs the setup checks and then starts the bot. An optional
.properties file can be passed as the first argument.
"""

import asyncio
import importlib.util
import sys

from config import ConfigError, TelegramPostConfig, apply_properties_to_env, get_bot_token

REQUIRED_MODULES = ["discord", "aiohttp", "dotenv", "bs4"]


def check_python_version():
    """Check if Python version is compatible"""
    if sys.version_info < (3, 8):
        print("❌ Error: Python 3.8 or higher is required!")
        print(f"Current version: {sys.version}")
        return False
    return True


def check_dependencies():
    """Check if required dependencies are installed"""
    missing = [name for name in REQUIRED_MODULES if importlib.util.find_spec(name) is None]
    if missing:
        print(f"❌ Missing dependencies: {', '.join(missing)}")
        print("Please install dependencies with: pip install -e .")
        return False
    return True


def check_bot_token():
    """Check if bot token is configured"""
    if not get_bot_token():
        print("❌ Discord bot token not found!")
        print("Set DISCORD_BOT_TOKEN in a .env file, a .properties file or the environment.")
        print("Get your bot token from: https://discord.com/developers/applications")
        return False
    return True


def check_telegram_config():
    """Check that the Telegram channel settings are usable"""
    try:
        config = TelegramPostConfig.from_env()
    except ConfigError as e:
        print(f"❌ {e}")
        print("Example: TELEGRAM_CHANNEL_NAMES=somechannel,otherchannel")
        return False
    print(f"({len(config.channel_names)} channel(s))", end=" ")
    return True


def main(argv=None):
    """Main startup function"""
    argv = sys.argv[1:] if argv is None else argv
    if argv:
        apply_properties_to_env(argv[0])

    print("🤖 Meme Bot - Startup Check")
    print("=" * 40)

    checks = [
        ("Python Version", check_python_version),
        ("Dependencies", check_dependencies),
        ("Bot Token", check_bot_token),
        ("Telegram Channels", check_telegram_config),
    ]

    failed_checks = []
    for check_name, check_func in checks:
        print(f"Checking {check_name}...", end=" ")
        if check_func():
            print("✅")
        else:
            print("❌")
            failed_checks.append(check_name)

    if failed_checks:
        print(f"\n❌ {len(failed_checks)} check(s) failed. Please fix the issues above.")
        return False

    print("\n✅ All checks passed! Starting the bot...")
    print("=" * 40)

    from bot import main as bot_main
    try:
        # Properties were already exported above
        asyncio.run(bot_main([]))
    except KeyboardInterrupt:
        print("\n🛑 Bot stopped by user")

    return True


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
