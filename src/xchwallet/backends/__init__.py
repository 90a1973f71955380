"""
Wallet service backends.

Available backends:
- CloudWalletBackend: remote custodial signing service over HTTPS
"""

from xchwallet.backends.base import WalletBackend
from xchwallet.backends.cloud_wallet import CloudWalletBackend

__all__ = [
    "CloudWalletBackend",
    "WalletBackend",
]
