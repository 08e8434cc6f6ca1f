from __future__ import annotations

import functools
import logging

import discord

from ...jobs.maintenance import prune_without_priority, refresh_roles
from ..views import WalletPanelView

logger = logging.getLogger("wallet_role_bot")


class AdminMixin:
    async def post_wallet_panel(self, interaction: discord.Interaction) -> None:
        embed = discord.Embed(description="Submit your wallet", color=0x2B2D31)
        await interaction.response.send_message(
            embed=embed,
            view=WalletPanelView(self),
            allowed_mentions=discord.AllowedMentions.none(),
        )

    def _dm_notifier(self, interaction: discord.Interaction):
        async def _notify(text: str) -> None:
            await interaction.user.send(text)

        return _notify

    async def start_role_refresh(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        guild = interaction.guild
        if guild is None:
            await interaction.edit_original_response(content="This command only works inside a server.")
            return

        snapshot = await self.ledger.locate_all()
        await interaction.edit_original_response(
            content=f"Refreshing roles for {len(snapshot)} user(s). I'll DM you when done."
        )
        lookup = functools.partial(self.lookup_member_label, guild)
        self.jobs.submit(
            "refresh-wallet-roles",
            lambda: refresh_roles(
                self.ledger,
                lookup,
                self.settings.role_refresh_concurrency,
                snapshot=snapshot,
            ),
            self._dm_notifier(interaction),
        )

    async def start_prune(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        guild = interaction.guild
        if guild is None:
            await interaction.edit_original_response(content="This command only works inside a server.")
            return

        snapshot = await self.ledger.locate_all()
        await interaction.edit_original_response(
            content=f"Scanning {len(snapshot)} user(s) to prune entries without priority roles. I'll DM you when done."
        )
        lookup = functools.partial(self.lookup_member_label, guild)
        self.jobs.submit(
            "prune-no-priority-roles",
            lambda: prune_without_priority(
                self.ledger,
                lookup,
                self.settings.role_refresh_concurrency,
                snapshot=snapshot,
            ),
            self._dm_notifier(interaction),
        )
