"""Currency wallet and its save provider.

Every currency balance is a Decimal, so balances keep growing past float range
instead of turning into inf. The wallet also tracks lifetime earnings per
currency, which prestige formulas typically scale from.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from idlevault.bignum.decimal import Decimal
from idlevault.saves.base import BaseSaveProvider

if TYPE_CHECKING:
    from idlevault.bignum.decimal import DecimalSource

logger = logging.getLogger(__name__)


class Wallet:
    """Named Decimal balances.

    Attributes:
        balances: Currency name -> current balance.
        lifetime: Currency name -> total ever earned.
    """

    def __init__(self) -> None:
        """Initialize an empty wallet."""
        self.balances: dict[str, Decimal] = {}
        self.lifetime: dict[str, Decimal] = {}

    def get(self, currency: str) -> Decimal:
        """Return the balance of currency (zero if never earned)."""
        return self.balances.get(currency, Decimal.zero())

    def earn(self, currency: str, amount: DecimalSource) -> Decimal:
        """Add a non-negative amount and return the new balance.

        Raises:
            ValueError: If amount is negative.
        """
        value = Decimal.create(amount)
        if value.is_negative():
            msg = f"Cannot earn a negative amount of {currency}: {value}"
            raise ValueError(msg)

        self.balances[currency] = self.get(currency) + value
        self.lifetime[currency] = self.lifetime.get(currency, Decimal.zero()) + value
        return self.balances[currency]

    def can_afford(self, currency: str, cost: DecimalSource) -> bool:
        """Return True if the balance covers cost."""
        return self.get(currency).gte(cost)

    def spend(self, currency: str, cost: DecimalSource) -> bool:
        """Deduct cost if affordable.

        Returns:
            True if spent, False if the balance was too low.
        """
        if not self.can_afford(currency, cost):
            return False
        self.balances[currency] = self.get(currency) - Decimal.create(cost)
        return True

    def reset(self) -> None:
        """Empty every balance and lifetime total."""
        self.balances.clear()
        self.lifetime.clear()


class WalletSaveProvider(BaseSaveProvider):
    """Saves a Wallet as serialized Decimals.

    Snapshot format:
        {"balances": {"gold": {"mantissa": 1.5, "exponent": 42}},
         "lifetime": {"gold": {"mantissa": 3.0, "exponent": 42}}}

    Attributes:
        wallet: The wallet being saved.
    """

    name: ClassVar[str] = "wallet"

    def __init__(self, wallet: Wallet | None = None) -> None:
        """Initialize with an existing wallet or a new empty one."""
        self.wallet = wallet or Wallet()

    def get_snapshot(self) -> dict[str, Any]:
        """Return balances and lifetime totals."""
        return {
            "balances": {name: value.serialize() for name, value in self.wallet.balances.items()},
            "lifetime": {name: value.serialize() for name, value in self.wallet.lifetime.items()},
        }

    def apply_snapshot(self, snapshot: Any) -> None:  # noqa: ANN401
        """Replace the wallet contents; missing or malformed sections load as empty."""
        self.wallet.reset()
        if not isinstance(snapshot, dict):
            return

        for section, target in (("balances", self.wallet.balances), ("lifetime", self.wallet.lifetime)):
            values = snapshot.get(section)
            if not isinstance(values, dict):
                continue
            for currency, value in values.items():
                target[currency] = Decimal.deserialize(value)

        logger.debug("Restored %d wallet balances", len(self.wallet.balances))

    def reset(self) -> None:
        """Empty the wallet."""
        self.wallet.reset()
