from __future__ import annotations

import contextlib
import logging

import discord

from ...ledger.models import SKIPPED, UPDATED, WalletRecord
from ...roles import highest_priority_label
from ..common import (
    GENERIC_ERROR_MESSAGE,
    INVALID_ADDRESS_MESSAGE,
    NO_PRIORITY_ROLE_MESSAGE,
    display_username,
    is_likely_evm_address,
)

logger = logging.getLogger("wallet_role_bot")


class WalletMixin:
    async def member_priority_label(self, interaction: discord.Interaction) -> str:
        user = interaction.user
        if isinstance(user, discord.Member):
            return highest_priority_label((role.id for role in user.roles), self.settings.priority_roles)
        if interaction.guild is None:
            return ""
        try:
            return await self.lookup_member_label(interaction.guild, str(user.id))
        except discord.HTTPException as exc:
            logger.warning("Could not fetch roles for user %s: %s", user.id, exc)
            return ""

    async def lookup_member_label(self, guild: discord.Guild, user_id: str) -> str:
        member = guild.get_member(int(user_id))
        if member is None:
            try:
                member = await guild.fetch_member(int(user_id))
            except discord.NotFound:
                return ""
        return highest_priority_label((role.id for role in member.roles), self.settings.priority_roles)

    async def handle_wallet_submission(self, interaction: discord.Interaction, raw_wallet: str) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)

        wallet = raw_wallet.strip()
        if not is_likely_evm_address(wallet):
            await interaction.edit_original_response(content=INVALID_ADDRESS_MESSAGE)
            return

        label = await self.member_priority_label(interaction)
        record = WalletRecord(
            username=display_username(interaction.user),
            user_id=str(interaction.user.id),
            wallet_address=wallet,
        )
        result = await self.ledger.upsert(record, label)
        if result.action == SKIPPED:
            await interaction.edit_original_response(content=NO_PRIORITY_ROLE_MESSAGE)
            return
        verb = "updated" if result.action == UPDATED else "saved"
        await interaction.edit_original_response(content=f"Wallet {verb} successfully.")

    async def handle_status_check(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        record = await self.ledger.get_wallet(str(interaction.user.id))
        if record is None:
            await interaction.edit_original_response(content="You have not submitted a wallet yet.")
            return

        embed = discord.Embed(title="Wallet Submission", color=0x2ECC71)
        embed.add_field(name="Discord Username", value=record.username or "Unknown", inline=True)
        embed.add_field(name="Discord ID", value=record.user_id, inline=True)
        embed.add_field(name="EVM Wallet", value=record.wallet_address or "N/A", inline=False)
        embed.add_field(name="Role", value=record.role_label or "N/A", inline=True)
        await interaction.edit_original_response(embed=embed)

    async def report_interaction_error(self, interaction: discord.Interaction, error: BaseException) -> None:
        logger.error("Interaction error", exc_info=error)
        with contextlib.suppress(discord.HTTPException):
            if interaction.response.is_done():
                await interaction.followup.send(GENERIC_ERROR_MESSAGE, ephemeral=True)
            else:
                await interaction.response.send_message(GENERIC_ERROR_MESSAGE, ephemeral=True)
