"""Durable backends for the order store."""
from .in_memory_backend import InMemoryOrderBackend
from .json_file_backend import JsonFileOrderBackend
from .sql_backend import SqlOrderBackend, create_order_engine
