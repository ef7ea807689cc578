from fastapi import FastAPI

from .inbound import router as inbound_router
from .messages import router as messages_router
from .orders import router as orders_router
from .session import router as session_router

def register_routes(app: FastAPI):
    app.include_router(orders_router, prefix="/v1")
    app.include_router(messages_router, prefix="/v1")
    app.include_router(session_router, prefix="/v1")
    app.include_router(inbound_router, prefix="/v1")
