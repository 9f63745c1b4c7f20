from .worker import Worker
from .picking import Picking, WorkType, utcnow
from .data_report import DataReport

__all__ = ["Worker", "Picking", "WorkType", "DataReport", "utcnow"]
