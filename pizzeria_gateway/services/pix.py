"""PIX generation for an order: dynamic charge via provider, static fallback"""

import logging
import time
import uuid
from decimal import Decimal
from typing import Optional
import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pizzeria_gateway.domain.exceptions import PaymentProviderError
from pizzeria_gateway.domain.models import PixMerchantConfig, PixResult, StoreSettings
from pizzeria_gateway.domain.pix import build_static_pix_payload, derive_tx_id, mask_pix_key
from pizzeria_gateway.domain.providers import DynamicChargeProvider
from pizzeria_gateway.infrastructure.database.repositories import OrderRepository, SettingsRepository
from pizzeria_gateway.infrastructure.observability.logging import log_provider_failure
from pizzeria_gateway.infrastructure.observability.metrics import (
    provider_latency_histogram,
    record_pix_generated,
    record_provider_failure,
)

DEFAULT_PAYER_NAME = "Cliente"


class PixService:
    """Produces a payable PIX code for an order; never blocks checkout on provider outages"""

    def __init__(
        self,
        db: Session,
        merchant: PixMerchantConfig,
        provider: Optional[DynamicChargeProvider] = None,
    ):
        self.db = db
        self.merchant = merchant
        self.provider = provider
        self.orders = OrderRepository(db)
        self.store_settings = SettingsRepository(db)

    async def generate(
        self,
        order_id: uuid.UUID,
        customer_name: str | None = None,
        client_amount: Decimal | float | None = None,
    ) -> PixResult:
        """
        Generate a PIX code for an order.

        Flow:
        1. Read the order total from storage (client amounts are ignored)
        2. Derive the txid from the order id
        3. Try the dynamic provider if configured
        4. Build a static payload when there is no provider or it failed
        5. Persist the txid on the order

        Raises:
            OrderNotFoundError, InvalidOrderError, OrderStorageError: Fatal order problems
        """
        amount = self.orders.get_order_total(order_id)
        if client_amount is not None and Decimal(str(client_amount)) != amount:
            logging.warning(
                "Client-supplied amount ignored",
                extra={"order_id": str(order_id), "client_amount": str(client_amount), "amount": str(amount)},
            )

        tx_id = derive_tx_id(str(order_id))
        store = self._load_store_settings()
        pix_key, merchant_name = self._static_receiver(store)

        pix_code = None
        provider_tag = "static"
        if self.provider is not None:
            pix_code = await self._try_dynamic_charge(order_id, amount, tx_id, customer_name)
            provider_tag = "efipay" if pix_code else "static_fallback"

        if not pix_code:
            pix_code = build_static_pix_payload(pix_key, merchant_name, self.merchant.merchant_city, amount, tx_id)

        self.orders.set_pix_transaction_id(order_id, tx_id)
        self.db.commit()

        record_pix_generated(provider_tag)
        return PixResult(
            pix_code=pix_code,
            tx_id=tx_id,
            amount=amount,
            provider=provider_tag,
            pix_key=mask_pix_key(store.pix_key),
        )

    async def _try_dynamic_charge(
        self,
        order_id: uuid.UUID,
        amount: Decimal,
        tx_id: str,
        customer_name: str | None,
    ) -> str | None:
        start_time = time.time()
        try:
            code = await self.provider.request_dynamic_charge(amount, tx_id, customer_name or DEFAULT_PAYER_NAME)
        except PaymentProviderError as e:
            record_provider_failure(e.stage)
            log_provider_failure(str(order_id), tx_id, e.stage, str(e))
            return None
        except httpx.HTTPError as e:
            record_provider_failure("unknown")
            log_provider_failure(str(order_id), tx_id, "unknown", str(e))
            return None
        except Exception as e:
            # Any provider failure degrades to a static code
            record_provider_failure("unknown")
            log_provider_failure(str(order_id), tx_id, "unknown", f"{type(e).__name__}: {e}")
            return None

        provider_latency_histogram.observe(time.time() - start_time)
        if not code or not isinstance(code, str):
            record_provider_failure("empty_code")
            log_provider_failure(str(order_id), tx_id, "empty_code", f"Provider returned {code!r}")
            return None
        return code

    def _load_store_settings(self) -> StoreSettings:
        try:
            return self.store_settings.get_settings()
        except SQLAlchemyError as e:
            logging.warning(f"Store settings unavailable, using defaults: {e}")
            self.db.rollback()
            return StoreSettings()

    def _static_receiver(self, store: StoreSettings) -> tuple[str, str]:
        pix_key = store.pix_key or self.merchant.pix_key
        merchant_name = store.pix_name or store.name or self.merchant.merchant_name
        return pix_key, merchant_name
