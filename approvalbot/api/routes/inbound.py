from fastapi import APIRouter, Depends, HTTPException

from approvalbot.api.core.container import Container, get_container
from approvalbot.api.schemas import InboundResponse
from approvalbot.api.security import verify_api_key
from approvalbot.core.errors import PersistenceFailure
from approvalbot.services.inbound import InboundMessage

router = APIRouter(tags=["Inbound"], dependencies=[Depends(verify_api_key)])


@router.post("/inbound", response_model=InboundResponse)
async def receive_message(
    event: InboundMessage,
    container: Container = Depends(get_container),
):
    """Webhook for chat messages pushed by the messaging gateway."""
    try:
        outcome = await container.inbound.handle(event)
    except PersistenceFailure as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    if outcome is None:
        return InboundResponse(handled=False)
    return InboundResponse(
        handled=True,
        outcome=outcome.kind.value,
        status=outcome.status.value if outcome.status else None,
    )
