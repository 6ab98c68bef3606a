from sqlalchemy import Column, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class DiagramRecord(Base):
    __tablename__ = "diagrams"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    # ISO-8601 text, sorts chronologically
    created_at = Column(String(32), nullable=False)
    updated_at = Column(String(32), nullable=False, index=True)
    document = Column(Text, nullable=False)
