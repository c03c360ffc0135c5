from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func

Base = declarative_base()


class KeyValue(Base):
    __tablename__ = "kv_store"
    key = Column(String, primary_key=True)    # namespaced, e.g. lifeflow_schedule_2024-01-15
    value = Column(Text, nullable=False)      # JSON document
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now())
