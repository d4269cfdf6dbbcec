from sqlalchemy import Column, String, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from doceditor.db.base import BaseModel


class Project(BaseModel):
    __tablename__ = "projects"

    name = Column(String(255), nullable=False)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.uuid"), nullable=False)

    # Relationships
    owner = relationship("User", back_populates="projects")
    documents = relationship("Document", back_populates="project", cascade="all, delete-orphan")


class Document(BaseModel):
    __tablename__ = "documents"

    title = Column(String(255), nullable=False, default="Untitled Document")
    # Сериализованное дерево содержимого (JSON); пустая строка - документ еще не редактировался
    content = Column(Text, nullable=False, default="")
    project_id = Column(Uuid(as_uuid=True), ForeignKey("projects.uuid"), nullable=False)
    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.uuid"), nullable=False)

    # Relationships
    project = relationship("Project", back_populates="documents")
    owner = relationship("User", back_populates="owned_documents")
