from sqlalchemy import Column, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

class OrderRecord(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True)
    recipients = Column(Text, nullable=False)       # JSON: key -> null | "yes" | "no"
    reject_reasons = Column(Text, nullable=False)   # JSON: key -> reason
    callback_url = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")
