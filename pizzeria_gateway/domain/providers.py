"""Payment provider interface for dynamic PIX charges"""

from decimal import Decimal
from typing import Protocol


class DynamicChargeProvider(Protocol):
    """Provider able to issue a dynamic PIX charge for an exact amount"""

    async def request_dynamic_charge(self, amount: Decimal, tx_id: str, payer_name: str) -> str:
        """
        Create a charge and return its "Copia e Cola" code.

        Raises:
            PaymentProviderError: On any failure; callers fall back to a static code
        """
        ...
