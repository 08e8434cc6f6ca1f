from __future__ import annotations

import asyncio
import logging

import discord
from discord import app_commands

from ..config import Settings
from ..jobs.runner import JobRunner
from ..ledger.store import WalletLedger
from .mixins.admin_mixin import AdminMixin
from .mixins.wallet_mixin import WalletMixin
from .views import WalletPanelView

logger = logging.getLogger("wallet_role_bot")


class WalletRoleDiscordBot(
    AdminMixin,
    WalletMixin,
    discord.Client,
):
    def __init__(
        self,
        settings: Settings,
        ledger: WalletLedger,
        jobs: JobRunner | None = None,
    ) -> None:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True

        super().__init__(intents=intents)

        self.settings = settings
        self.ledger = ledger
        self.jobs = jobs or JobRunner()
        self.tree = app_commands.CommandTree(self)
        self._register_commands()

    def _register_commands(self) -> None:
        @self.tree.command(name="submit-wallet-setup", description="Post the wallet submission message in this channel")
        @app_commands.guild_only()
        @app_commands.default_permissions(manage_guild=True)
        async def submit_wallet_setup(interaction: discord.Interaction) -> None:
            await self.post_wallet_panel(interaction)

        @self.tree.command(name="refresh-wallet-roles", description="Refresh stored roles for submitted wallets")
        @app_commands.guild_only()
        @app_commands.default_permissions(manage_guild=True)
        async def refresh_wallet_roles(interaction: discord.Interaction) -> None:
            await self.start_role_refresh(interaction)

        @self.tree.command(
            name="prune-no-priority-roles",
            description="Remove sheet entries for users without any priority role",
        )
        @app_commands.guild_only()
        @app_commands.default_permissions(manage_guild=True)
        async def prune_no_priority_roles(interaction: discord.Interaction) -> None:
            await self.start_prune(interaction)

        @self.tree.error
        async def on_app_command_error(
            interaction: discord.Interaction,
            error: app_commands.AppCommandError,
        ) -> None:
            await self.report_interaction_error(interaction, error)

    async def setup_hook(self) -> None:
        await self.ledger.start()
        try:
            await self.ledger.ensure_setup()
        except Exception:
            logger.exception("Sheets warm-up failed")

        self.add_view(WalletPanelView(self))
        await self._sync_commands()

    async def _sync_commands(self) -> None:
        try:
            if self.settings.discord_guild_id:
                guild = discord.Object(id=self.settings.discord_guild_id)
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
                logger.info("Guild commands registered.")
            else:
                await self.tree.sync()
                logger.info("Global commands registered (may take up to 1 hour to appear).")
        except discord.HTTPException:
            logger.exception("Failed to register commands")

    async def close(self) -> None:
        await self._run_shutdown_step("jobs.close", self.jobs.close(), timeout=6.0)
        await self._run_shutdown_step("ledger.close", self.ledger.close(), timeout=6.0)
        await self._run_shutdown_step("discord.Client.close", super().close(), timeout=6.0)

    async def _run_shutdown_step(self, label: str, coro: object, *, timeout: float) -> None:
        try:
            await asyncio.wait_for(coro, timeout=timeout)  # type: ignore[arg-type]
        except asyncio.TimeoutError:
            logger.warning("Shutdown step timed out: %s", label)
        except Exception as exc:
            logger.warning("Shutdown step failed: %s (%s)", label, exc)

    async def on_ready(self) -> None:
        if self.user:
            logger.info("Connected as %s (%s)", self.user, self.user.id)
