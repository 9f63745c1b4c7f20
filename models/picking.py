from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime, timezone
from enum import Enum
from database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorkType(str, Enum):
    PICKING = "picking"
    PACKING = "packing"
    LABELLING = "labelling"
    LIQUID_PRODUCTION = "liquid production"
    PREPARATION = "preparation"
    CHECKING = "checking"
    RESTOCKING = "restocking"
    SUB_DIVISION = "sub division"


class Picking(Base):
    __tablename__ = "picking"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # No foreign key: deleting a worker leaves its picking rows in place
    worker_id = Column(Integer, nullable=False, index=True)
    work_type = Column(String, nullable=False, index=True)
    subtask = Column(Text, nullable=True)
    subtask_quantity = Column(Integer, nullable=True)
    start_timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    end_timestamp = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_open(self) -> bool:
        return self.end_timestamp is None

    def __repr__(self):
        return f"<Picking(id={self.id}, worker_id={self.worker_id}, work_type='{self.work_type}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'worker_id': self.worker_id,
            'work_type': self.work_type,
            'subtask': self.subtask,
            'subtask_quantity': self.subtask_quantity,
            'start_timestamp': self.start_timestamp.isoformat() if self.start_timestamp else None,
            'end_timestamp': self.end_timestamp.isoformat() if self.end_timestamp else None
        }
