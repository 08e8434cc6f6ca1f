from __future__ import annotations

import re

_EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

INVALID_ADDRESS_MESSAGE = "Invalid EVM address. Please submit a 0x... address."
NO_PRIORITY_ROLE_MESSAGE = "Your wallet was not saved: you need one of the priority roles first."
GENERIC_ERROR_MESSAGE = "There was an error. Please try again."


def is_likely_evm_address(text: str) -> bool:
    # Shape check only, no EIP-55 checksum validation.
    return bool(_EVM_ADDRESS_RE.match((text or "").strip()))


def display_username(user: object) -> str:
    name = str(getattr(user, "name", "") or "unknown")
    discriminator = str(getattr(user, "discriminator", "") or "")
    if discriminator and discriminator != "0":
        return f"{name}#{discriminator}"
    return name
