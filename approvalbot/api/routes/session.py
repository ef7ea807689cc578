from fastapi import APIRouter, Depends, HTTPException

from approvalbot.api.core.container import Container, get_container
from approvalbot.api.schemas import StatusResponse
from approvalbot.api.security import verify_api_key
from approvalbot.core.errors import TransportError, TransportUnavailable

router = APIRouter(tags=["Session"])


@router.get("/status", response_model=StatusResponse)
async def get_status(container: Container = Depends(get_container)):
    """Report whether the messaging transport is connected."""
    return await container.intake.get_status()


@router.post("/logout", dependencies=[Depends(verify_api_key)])
async def logout(container: Container = Depends(get_container)):
    """Invalidate the chat session."""
    try:
        await container.intake.logout()
    except (TransportError, TransportUnavailable) as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return {"success": True}
