from typing import Literal

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # HTTP front door
    api_key: str = ""

    # Messaging gateway (the chat bridge that owns the device session)
    gateway_base_url: str = "http://127.0.0.1:3001"
    gateway_api_key: str | None = None

    # Order store
    store_backend: Literal["json", "sql"] = "json"
    order_file: str = "orders.json"
    database_url: str = "sqlite:///./orders.sqlite3"

    # Approval behaviour
    settle_mixed_orders: bool = True

    # Webhook callbacks
    callback_timeout: float = 10.0

    class Config:
        env_file = ".env"
        env_prefix = "APP_"


settings = Settings()
