from __future__ import annotations

from typing import Any

import discord

SUBMIT_WALLET_ID = "submit_wallet"
CHECK_STATUS_ID = "check_status"
WALLET_MODAL_ID = "wallet_modal"


class WalletModal(discord.ui.Modal, title="Submit your EVM wallet"):
    wallet_address: discord.ui.TextInput = discord.ui.TextInput(
        label="EVM wallet address (0x...)",
        placeholder="0x...",
        style=discord.TextStyle.short,
        required=True,
        max_length=100,
    )

    def __init__(self, bot: Any) -> None:
        super().__init__(custom_id=WALLET_MODAL_ID)
        self.bot = bot

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await self.bot.handle_wallet_submission(interaction, str(self.wallet_address.value or ""))

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        await self.bot.report_interaction_error(interaction, error)


class WalletPanelView(discord.ui.View):
    """Persistent panel; custom ids stay stable so buttons survive restarts."""

    def __init__(self, bot: Any) -> None:
        super().__init__(timeout=None)
        self.bot = bot

    @discord.ui.button(label="Submit Wallet", style=discord.ButtonStyle.success, custom_id=SUBMIT_WALLET_ID)
    async def submit_wallet(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await interaction.response.send_modal(WalletModal(self.bot))

    @discord.ui.button(label="Check Status", style=discord.ButtonStyle.primary, custom_id=CHECK_STATUS_ID)
    async def check_status(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self.bot.handle_status_check(interaction)

    async def on_error(self, interaction: discord.Interaction, error: Exception, item: discord.ui.Item) -> None:
        await self.bot.report_interaction_error(interaction, error)
