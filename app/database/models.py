from sqlalchemy import Column, String, Text
from app.database.config import Base


class StorageSlot(Base):
    """One key of the key-value storage, holding a serialized value."""

    __tablename__ = "storage_slots"

    key = Column(String, primary_key=True, index=True)
    value = Column(Text, nullable=False)
