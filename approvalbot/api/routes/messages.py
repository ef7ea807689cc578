from fastapi import APIRouter, Depends, HTTPException

from approvalbot.api.core.container import Container, get_container
from approvalbot.api.schemas import SendMessageRequest
from approvalbot.api.security import verify_api_key
from approvalbot.core.errors import InvalidRequest, TransportError, TransportUnavailable

router = APIRouter(tags=["Messages"], dependencies=[Depends(verify_api_key)])


@router.post("/send")
async def send_message(
    body: SendMessageRequest,
    container: Container = Depends(get_container),
):
    """Send a plain text message."""
    try:
        return await container.intake.send_message(to=body.to, text=body.text)
    except InvalidRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except TransportUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except TransportError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
