import json
import os
import tempfile
from pathlib import Path

from approvalbot.core.errors import PersistenceFailure
from approvalbot.domain.orders.entities import Order


class JsonFileOrderBackend:
    """
    OrderBackend backed by a single JSON file.

    Expected layout (one object keyed by order id):
        {
          "INV-1": {
            "recipients": {"62812@s.whatsapp.net": null},
            "rejectReasons": {},
            "callbackUrl": "https://example.com/hook",
            "status": "pending"
          }
        }

    Writes go to a temp file in the same directory which is then renamed over
    the target, so readers never observe a half-written file.
    """

    def __init__(self, *, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Order]:
        if not self._path.exists():
            return {}

        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as exc:
            raise PersistenceFailure(f"Corrupt order file {self._path}: {exc}") from exc

        if not isinstance(data, dict):
            raise PersistenceFailure(f"Corrupt order file {self._path}: expected a JSON object")

        return {order_id: Order.from_record(order_id, record) for order_id, record in data.items()}

    def save(self, orders: dict[str, Order]) -> None:
        data = {order_id: order.to_record() for order_id, order in orders.items()}
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(dir=self._path.parent, prefix=".orders_tmp_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self._path)
        except OSError as exc:
            Path(temp_path).unlink(missing_ok=True)
            raise PersistenceFailure(f"Unable to write {self._path}: {exc}") from exc
