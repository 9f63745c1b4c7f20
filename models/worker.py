from sqlalchemy import Column, Integer, String, Text, Boolean
from database import Base

class Worker(Base):
    __tablename__ = "workers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    soft_one_id = Column(String, nullable=True, index=True)
    name = Column(Text, nullable=False, unique=True)
    password = Column(Text, nullable=False)
    admin = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<Worker(id={self.id}, name='{self.name}', admin={self.admin})>"

    def to_dict(self):
        """Public representation; the password hash is never included"""
        return {
            'id': self.id,
            'soft_one_id': self.soft_one_id,
            'name': self.name,
            'admin': bool(self.admin)
        }
