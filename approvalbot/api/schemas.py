from typing import Optional, List

from pydantic import BaseModel, Field

class SendMessageRequest(BaseModel):
    to: Optional[str] = Field(default=None, description="Recipient phone number or chat address")
    text: Optional[str] = Field(default=None, description="Message body")


class SendOrderRequest(BaseModel):
    """
    Request body for creating an approval order.

    Image fields accept an http(s) URL, a ``data:image/...;base64,`` URI,
    or a path the gateway can read. They are sent in the order
    identity, flight_ticket, hotel_ticket, skipping empty ones.
    """

    orderId: Optional[str] = Field(default=None, description="Caller-supplied order id")
    recipients: Optional[List[str]] = Field(default=None, description="Recipient addresses")
    message: Optional[str] = Field(default=None, description="Approval request text")
    callbackUrl: Optional[str] = Field(default=None, description="Webhook notified on every answer")

    identity: Optional[str] = None
    flight_ticket: Optional[str] = None
    hotel_ticket: Optional[str] = None


class SendOrderResponse(BaseModel):
    success: bool
    orderId: str


class StatusResponse(BaseModel):
    connected: bool


class InboundResponse(BaseModel):
    handled: bool
    outcome: Optional[str] = None
    status: Optional[str] = None
