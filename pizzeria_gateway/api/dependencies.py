"""Dependency injection for FastAPI endpoints"""

from datetime import datetime
from typing import Optional
from fastapi import Request
from pizzeria_gateway.config import settings
from pizzeria_gateway.domain.models import PixMerchantConfig
from pizzeria_gateway.domain.providers import DynamicChargeProvider
from pizzeria_gateway.infrastructure.clients.efipay import EfiPayClient
from pizzeria_gateway.utils.date_utils import local_now


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_merchant_config() -> PixMerchantConfig:
    """Static PIX fallbacks from configuration"""
    return PixMerchantConfig(
        pix_key=settings.pix_default_key,
        merchant_name=settings.pix_default_merchant_name,
        merchant_city=settings.pix_merchant_city,
    )


def get_pix_provider(request: Request) -> Optional[DynamicChargeProvider]:
    """EfiPay client sharing the app's token cache, or None when credentials are absent"""
    if not settings.efipay_enabled:
        return None
    return EfiPayClient(token_cache=request.app.state.efipay_token_cache)


def get_store_now() -> datetime:
    """Current time in the store's timezone"""
    return local_now(settings.store_timezone)
