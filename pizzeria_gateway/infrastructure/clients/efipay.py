"""EfiPay PIX API client: OAuth2 client credentials, charge creation and QR fetch"""

import asyncio
import ssl
import time
from decimal import Decimal
from typing import Any, Callable, Dict
import httpx
from pizzeria_gateway.config import settings
from pizzeria_gateway.domain.exceptions import PaymentProviderError
from pizzeria_gateway.domain.pix import format_amount

EFIPAY_BASE_URL_PROD = "https://pix.api.efipay.com.br"
EFIPAY_BASE_URL_SANDBOX = "https://pix-h.api.efipay.com.br"


class TokenCache:
    """
    Access token with an expiry, shared by clients of one application.

    A token is considered stale refresh_margin_seconds before the
    provider's expires_in elapses.
    """

    def __init__(self, refresh_margin_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.refresh_margin_seconds = refresh_margin_seconds
        self.lock = asyncio.Lock()
        self._clock = clock
        self._token: str | None = None
        self._expires_at = 0.0

    def get(self) -> str | None:
        if self._token and self._expires_at - self._clock() > self.refresh_margin_seconds:
            return self._token
        return None

    def store(self, token: str, expires_in: float) -> None:
        self._token = token
        self._expires_at = self._clock() + expires_in

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0


class EfiPayClient:
    """Client for the EfiPay (ex-Gerencianet) PIX API"""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        pix_key: str | None = None,
        token_cache: TokenCache | None = None,
        base_url: str | None = None,
        sandbox: bool | None = None,
        timeout: float | None = None,
        certificate_path: str | None = None,
        charge_expiration_seconds: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = client_id or settings.efipay_client_id or ""
        self.client_secret = client_secret or settings.efipay_client_secret or ""
        self.pix_key = pix_key if pix_key is not None else settings.efipay_pix_key
        self.token_cache = token_cache or TokenCache(settings.efipay_token_refresh_margin_seconds)
        sandbox = settings.efipay_sandbox if sandbox is None else sandbox
        self.base_url = (
            base_url
            or settings.efipay_base_url
            or (EFIPAY_BASE_URL_SANDBOX if sandbox else EFIPAY_BASE_URL_PROD)
        )
        self.timeout = timeout or settings.http_timeout_seconds
        self.certificate_path = certificate_path or settings.efipay_certificate_path
        self.charge_expiration_seconds = charge_expiration_seconds or settings.efipay_charge_expiration_seconds
        self._transport = transport

    async def request_dynamic_charge(self, amount: Decimal, tx_id: str, payer_name: str) -> str:
        """
        Issue a dynamic charge and return its "Copia e Cola" code.

        Flow:
        1. Reuse the cached token or authenticate (client credentials)
        2. PUT /v2/cob/{txid} for the exact amount
        3. GET /v2/loc/{id}/qrcode when the charge has a location,
           otherwise use the charge's pixCopiaECola

        Raises:
            PaymentProviderError: Naming the stage that failed
        """
        async with self._http_client() as client:
            token = await self.get_access_token(client)
            charge = await self.create_charge(client, token, amount, tx_id, payer_name)

            loc = charge.get("loc")
            loc_id = loc.get("id") if isinstance(loc, dict) else None
            if loc_id is not None:
                qr_data = await self.get_qrcode(client, token, str(loc_id))
                code = qr_data.get("qrcode")
                stage = "qrcode"
            else:
                code = charge.get("pixCopiaECola")
                stage = "charge"

        if not code:
            raise PaymentProviderError(stage, "EfiPay returned an empty PIX code")
        return code

    async def get_access_token(self, client: httpx.AsyncClient) -> str:
        """Return a cached token or fetch a new one with Basic client credentials"""
        async with self.token_cache.lock:
            token = self.token_cache.get()
            if token:
                return token

            data = await self._call(
                "auth",
                client,
                "POST",
                "/oauth/token",
                auth=(self.client_id, self.client_secret),
                json={"grant_type": "client_credentials"},
            )
            try:
                token = data["access_token"]
                expires_in = float(data.get("expires_in", 3600))
            except (KeyError, ValueError, TypeError) as e:
                raise PaymentProviderError("auth", f"Invalid token response: {e}") from e

            self.token_cache.store(token, expires_in)
            return token

    async def create_charge(
        self,
        client: httpx.AsyncClient,
        token: str,
        amount: Decimal,
        tx_id: str,
        payer_name: str,
    ) -> Dict[str, Any]:
        """Create an immediate charge (cobrança imediata) identified by tx_id"""
        body = {
            "calendario": {"expiracao": self.charge_expiration_seconds},
            "devedor": {"nome": payer_name},
            "valor": {"original": format_amount(amount)},
            "chave": self.pix_key,
            "solicitacaoPagador": f"Pedido {tx_id}",
        }
        return await self._call(
            "charge",
            client,
            "PUT",
            f"/v2/cob/{tx_id}",
            headers={"Authorization": f"Bearer {token}"},
            json=body,
        )

    async def get_qrcode(self, client: httpx.AsyncClient, token: str, loc_id: str) -> Dict[str, Any]:
        return await self._call(
            "qrcode",
            client,
            "GET",
            f"/v2/loc/{loc_id}/qrcode",
            headers={"Authorization": f"Bearer {token}"},
        )

    def _http_client(self) -> httpx.AsyncClient:
        if self._transport is not None:
            return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

        verify: ssl.SSLContext | bool = True
        if self.certificate_path:
            # EfiPay requires mutual TLS with the account certificate
            try:
                verify = ssl.create_default_context()
                verify.load_cert_chain(self.certificate_path)
            except (OSError, ssl.SSLError) as e:
                raise PaymentProviderError("auth", f"Cannot load certificate {self.certificate_path}: {e}") from e

        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, verify=verify)

    async def _call(self, stage: str, client: httpx.AsyncClient, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await client.request(method, path, **kwargs)
            if response.status_code == 401 and stage != "auth":
                self.token_cache.invalidate()
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise PaymentProviderError(stage, f"EfiPay timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise PaymentProviderError(stage, f"EfiPay error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise PaymentProviderError(stage, f"EfiPay unreachable: {e}") from e
        except ValueError as e:
            raise PaymentProviderError(stage, f"Invalid JSON from EfiPay: {e}") from e

        if not isinstance(data, dict):
            raise PaymentProviderError(stage, "Unexpected EfiPay response shape")
        return data
