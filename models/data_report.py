from sqlalchemy import Column, Integer, Float, Date, DateTime, func
from database import Base

class DataReport(Base):
    __tablename__ = "data_reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    worker_id = Column(Integer, nullable=False, index=True)
    created = Column(Date, nullable=False, index=True)
    orders = Column(Integer, nullable=False, default=0)
    order_lines = Column(Integer, nullable=False, default=0)
    units = Column(Integer, nullable=False, default=0)
    time_spent = Column(Float, nullable=False, default=0.0)
    # NULL when the ratio is undefined (no picking hours / zero units)
    order_lines_per_hour = Column(Float, nullable=True)
    units_per_order_line = Column(Float, nullable=True)
    inserted_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            'id': self.id,
            'worker_id': self.worker_id,
            'date': self.created.isoformat() if self.created else None,
            'orders': self.orders,
            'order_lines': self.order_lines,
            'units': self.units,
            'time_spent': self.time_spent,
            'order_lines_per_hour': self.order_lines_per_hour,
            'units_per_order_line': self.units_per_order_line
        }
