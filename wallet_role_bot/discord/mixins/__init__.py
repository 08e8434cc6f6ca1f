from .admin_mixin import AdminMixin
from .wallet_mixin import WalletMixin

__all__ = [
    "AdminMixin",
    "WalletMixin",
]
