"""POST /v1/pix - PIX payment code for an order"""

import time
import logging
import uuid
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from pizzeria_gateway.api.v1.schemas import PixRequest, PixResponse
from pizzeria_gateway.api.dependencies import get_merchant_config, get_pix_provider, get_request_id
from pizzeria_gateway.infrastructure.database.session import get_db
from pizzeria_gateway.domain.exceptions import InvalidOrderError, OrderNotFoundError, OrderStorageError
from pizzeria_gateway.domain.models import PixMerchantConfig
from pizzeria_gateway.domain.providers import DynamicChargeProvider
from pizzeria_gateway.services.pix import PixService
from pizzeria_gateway.infrastructure.observability.logging import log_pix_generated

router = APIRouter()


@router.post("/pix", response_model=PixResponse)
async def generate_pix(
    request_body: PixRequest,
    request: Request,
    db: Session = Depends(get_db),
    merchant: PixMerchantConfig = Depends(get_merchant_config),
    provider: Optional[DynamicChargeProvider] = Depends(get_pix_provider),
):
    """
    Generate a PIX "Copia e Cola" code for an order.

    The charged amount always comes from the stored order total. Provider
    outages degrade to a static code instead of failing the request.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        order_id = uuid.UUID(request_body.order_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid order ID format")

    service = PixService(db, merchant, provider)

    try:
        result = await service.generate(
            order_id,
            customer_name=request_body.customer_name,
            client_amount=request_body.amount,
        )

    except OrderNotFoundError as e:
        db.rollback()
        logging.warning(f"Order not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail="Order not found")

    except InvalidOrderError as e:
        db.rollback()
        logging.warning(f"Invalid order: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except OrderStorageError as e:
        db.rollback()
        logging.error(f"Order storage error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Order storage unavailable")

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error generating PIX: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    log_pix_generated(request_id, str(order_id), result.tx_id, result.provider, duration_ms)

    return PixResponse(
        pix_code=result.pix_code,
        tx_id=result.tx_id,
        amount=float(result.amount),
        provider=result.provider,
        pix_key=result.pix_key,
    )
