"""Document SQLAlchemy model

Document represents a file uploaded against a debt case (letters, statements,
photos, video evidence). The binary lives on local disk at file_path.
"""

from sqlalchemy import Column, Integer, String, Index, DateTime
from sqlalchemy.sql import func

from .base import Base


class Document(Base):
    """Document model representing case file attachments.

    Each document belongs to one organisation and one case. Video documents
    are additionally tracked by the video retention service, which deletes
    the row (and the file) once the retention window has passed.
    """
    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_organisation_id", "organisation_id"),
        Index("ix_documents_case_id", "case_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(Integer, nullable=False)
    organisation_id = Column(Integer, nullable=False)
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=True)
    file_type = Column(String(100), nullable=True)
    file_path = Column(String(500), nullable=False)
    uploaded_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Document(id={self.id}, file_name='{self.file_name}', case_id={self.case_id})>"
