from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from doceditor.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)

    # Relationships
    projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan")
    owned_documents = relationship("Document", back_populates="owner", cascade="all, delete-orphan")
