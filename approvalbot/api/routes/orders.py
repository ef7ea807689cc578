from fastapi import APIRouter, Depends, HTTPException

from approvalbot.api.core.container import Container, get_container
from approvalbot.api.schemas import SendOrderRequest, SendOrderResponse
from approvalbot.api.security import verify_api_key
from approvalbot.core.errors import (
    InvalidRequest,
    PersistenceFailure,
    TransportError,
    TransportUnavailable,
)
from approvalbot.services.intake import Attachments

router = APIRouter(tags=["Orders"], dependencies=[Depends(verify_api_key)])


@router.post(
    "/send-order",
    summary="Request approval of an order",
    description="Sends the order message and attachments to every recipient and waits for their replies.",
    response_model=SendOrderResponse,
)
async def send_order(
    body: SendOrderRequest,
    container: Container = Depends(get_container),
):
    try:
        handle = await container.intake.create_order(
            order_id=body.orderId,
            recipients=body.recipients,
            message=body.message,
            attachments=Attachments(
                identity=body.identity,
                flight_ticket=body.flight_ticket,
                hotel_ticket=body.hotel_ticket,
            ),
            callback_url=body.callbackUrl,
        )
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except TransportUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except TransportError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    except PersistenceFailure as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    return SendOrderResponse(success=True, orderId=handle.order_id)
