from __future__ import annotations

import asyncio
import logging

from .config import Settings
from .discord.client import WalletRoleDiscordBot
from .jobs.runner import JobRunner
from .ledger.store import WalletLedger
from .sheets.factory import build_table

logger = logging.getLogger("wallet_role_bot")


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)
    logging.getLogger("discord.client").setLevel(logging.WARNING)


def build_ledger(settings: Settings) -> WalletLedger:
    table = build_table(settings)
    return WalletLedger(table, verify_row_identity=settings.verify_row_identity)


def build_bot(settings: Settings) -> WalletRoleDiscordBot:
    ledger = build_ledger(settings)
    logger.info("Wallet ledger backend: %s", ledger.backend_name)
    return WalletRoleDiscordBot(settings=settings, ledger=ledger, jobs=JobRunner())


async def _run_bot(settings: Settings) -> None:
    bot = build_bot(settings)
    async with bot:
        await bot.start(settings.discord_token)


def main() -> None:
    configure_logging()
    settings = Settings.from_env()
    settings.validate()
    try:
        asyncio.run(_run_bot(settings))
    except KeyboardInterrupt:
        logger.info("Shutdown requested, exiting.")
