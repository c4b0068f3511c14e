from decimal import Decimal
from fastapi import FastAPI, Header, HTTPException, Request
import base64
import itertools
import os

from pizzeria_gateway.domain.brcode import crc16, format_field

app = FastAPI(title="Mock EfiPay Server", version="1.0.0")

CLIENT_ID = os.getenv("MOCK_EFIPAY_CLIENT_ID", "mock-client")
CLIENT_SECRET = os.getenv("MOCK_EFIPAY_CLIENT_SECRET", "mock-secret")
ACCESS_TOKEN = "mock-access-token"

_charges: dict[str, dict] = {}
_loc_ids = itertools.count(1)


def _require_bearer(authorization: str | None) -> None:
    if authorization != f"Bearer {ACCESS_TOKEN}":
        raise HTTPException(status_code=401, detail="invalid token")


def _dynamic_code(location: str) -> str:
    # Dynamic BR Code: the account template carries a location URL (25) instead of a key
    account = format_field("00", "BR.GOV.BCB.PIX") + format_field("25", location)
    payload = (
        format_field("00", "01")
        + format_field("01", "12")
        + format_field("26", account)
        + format_field("52", "0000")
        + format_field("53", "986")
        + format_field("58", "BR")
        + format_field("59", "MOCK EFIPAY")
        + format_field("60", "SAO PAULO")
        + format_field("62", format_field("05", "***"))
        + "6304"
    )
    return payload + crc16(payload)


@app.get("/health")
def health(): return {"status": "ok"}


@app.post("/oauth/token")
async def token(request: Request, authorization: str | None = Header(None)):
    expected = base64.b64encode(f"{CLIENT_ID}:{CLIENT_SECRET}".encode()).decode()
    if authorization != f"Basic {expected}":
        raise HTTPException(status_code=401, detail="invalid client credentials")
    body = await request.json()
    if body.get("grant_type") != "client_credentials":
        raise HTTPException(status_code=400, detail="unsupported grant_type")
    return {"access_token": ACCESS_TOKEN, "token_type": "Bearer", "expires_in": 3600, "scope": "cob.write"}


@app.put("/v2/cob/{txid}")
async def create_charge(txid: str, request: Request, authorization: str | None = Header(None)):
    _require_bearer(authorization)
    body = await request.json()
    try:
        Decimal(body["valor"]["original"])
    except (KeyError, TypeError, ArithmeticError):
        raise HTTPException(status_code=400, detail="valor.original invalido")

    loc_id = next(_loc_ids)
    location = f"pix-h.api.efipay.com.br/v2/loc/{loc_id}"
    charge = {
        "txid": txid,
        "status": "ATIVA",
        "calendario": body.get("calendario", {}),
        "devedor": body.get("devedor", {}),
        "valor": body["valor"],
        "chave": body.get("chave", ""),
        "solicitacaoPagador": body.get("solicitacaoPagador"),
        "loc": {"id": loc_id, "location": location, "tipoCob": "cob"},
        "pixCopiaECola": _dynamic_code(location),
    }
    _charges[str(loc_id)] = charge
    return charge


@app.get("/v2/loc/{loc_id}/qrcode")
def get_qrcode(loc_id: str, authorization: str | None = Header(None)):
    _require_bearer(authorization)
    charge = _charges.get(loc_id)
    if charge is None:
        raise HTTPException(status_code=404, detail="location not found")
    return {"qrcode": charge["pixCopiaECola"], "imagemQrcode": "data:image/png;base64,", "linkVisualizacao": ""}
