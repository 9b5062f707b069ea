"""Reference save providers."""

from idlevault.providers.display import DisplaySettingsProvider
from idlevault.providers.wallet import Wallet, WalletSaveProvider

__all__ = ["DisplaySettingsProvider", "Wallet", "WalletSaveProvider"]
