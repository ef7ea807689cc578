# ============================================================
# DB access layer
# ============================================================
import json

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from approvalbot.core.errors import PersistenceFailure
from approvalbot.domain.orders.entities import Order

from .models import Base


def create_order_engine(database_url: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args)


class SqlOrderBackend:
    """
    OrderBackend backed by an ``orders`` table.

    ``save`` rewrites the whole table inside one transaction, so a reader
    sees either the previous snapshot or the new one.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._sessions = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        Base.metadata.create_all(bind=engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SqlOrderBackend":
        return cls(create_order_engine(database_url))

    def load(self) -> dict[str, Order]:
        query = text("""
                SELECT id, recipients, reject_reasons, callback_url, status
                FROM orders
                ORDER BY id
                """)
        try:
            with self._sessions() as db:
                rows = db.execute(query).mappings().all()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Unable to read orders table: {exc}") from exc

        orders: dict[str, Order] = {}
        for row in rows:
            orders[row["id"]] = Order.from_record(
                row["id"],
                {
                    "recipients": json.loads(row["recipients"]),
                    "rejectReasons": json.loads(row["reject_reasons"]),
                    "callbackUrl": row["callback_url"],
                    "status": row["status"],
                },
            )
        return orders

    def save(self, orders: dict[str, Order]) -> None:
        insert = text("""
                INSERT INTO orders (
                    id,
                    recipients,
                    reject_reasons,
                    callback_url,
                    status
                ) VALUES (
                    :id,
                    :recipients,
                    :reject_reasons,
                    :callback_url,
                    :status
                )
                """)
        params = []
        for order_id, order in orders.items():
            record = order.to_record()
            params.append({
                "id": order_id,
                "recipients": json.dumps(record["recipients"], ensure_ascii=False),
                "reject_reasons": json.dumps(record["rejectReasons"], ensure_ascii=False),
                "callback_url": record["callbackUrl"],
                "status": record["status"],
            })

        try:
            with self._sessions() as db, db.begin():
                db.execute(text("DELETE FROM orders"))
                if params:
                    db.execute(insert, params)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Unable to write orders table: {exc}") from exc
