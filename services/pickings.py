"""
Picking data access: task lifecycle and report queries.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from config import settings
from models import Picking, Worker, WorkType, utcnow
from services.exceptions import PickingClosedError, PickingNotFoundError, PickingOwnershipError

logger = logging.getLogger(__name__)

# Maximum number of open records per work type before it stops being offered
WORK_TYPE_CAPACITY: Dict[WorkType, int] = {
    WorkType.PICKING: 10,
    WorkType.PACKING: 5,
    WorkType.LABELLING: 2,
    WorkType.LIQUID_PRODUCTION: 2,
    WorkType.PREPARATION: 2,
    WorkType.CHECKING: 2,
    WorkType.RESTOCKING: 2,
    WorkType.SUB_DIVISION: 2,
}


def report_window(
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Fill in the default trailing window for report queries"""
    end = to_date or utcnow()
    start = from_date or end - timedelta(days=settings.REPORT_WINDOW_DAYS)
    return start, end


def create_picking(db: Session, worker_id: int, work_type: WorkType) -> Picking:
    picking = Picking(
        worker_id=worker_id,
        work_type=WorkType(work_type).value,
        start_timestamp=utcnow()
    )
    db.add(picking)
    db.commit()
    db.refresh(picking)
    logger.info(f"Worker {worker_id} started {picking.work_type} (picking {picking.id})")
    return picking


def get_picking(db: Session, picking_id: int) -> Picking:
    picking = db.get(Picking, picking_id)
    if picking is None:
        raise PickingNotFoundError(picking_id)
    return picking


def close_picking(
    db: Session,
    picking_id: int,
    worker_id: int,
    is_admin: bool = False,
    subtask: Optional[str] = None,
    subtask_quantity: Optional[int] = None
) -> Picking:
    """
    Set the end timestamp of an open record to now.

    Raises:
        PickingNotFoundError: no such record
        PickingOwnershipError: record belongs to another worker and caller is no admin
        PickingClosedError: record was already closed
    """
    picking = get_picking(db, picking_id)
    if picking.worker_id != worker_id and not is_admin:
        raise PickingOwnershipError(f"Picking with id {picking_id} belongs to another worker")
    if not picking.is_open:
        raise PickingClosedError(picking_id)

    picking.end_timestamp = utcnow()
    picking.subtask = subtask
    picking.subtask_quantity = subtask_quantity
    db.commit()
    db.refresh(picking)
    return picking


def delete_picking(db: Session, picking_id: int) -> None:
    picking = get_picking(db, picking_id)
    db.delete(picking)
    db.commit()


def get_pickings(db: Session, worker_id: int) -> List[Picking]:
    return (
        db.query(Picking)
        .filter(Picking.worker_id == worker_id)
        .order_by(Picking.id.desc())
        .all()
    )


def get_latest_picking(db: Session, worker_id: int) -> Optional[Picking]:
    return (
        db.query(Picking)
        .filter(Picking.worker_id == worker_id)
        .order_by(Picking.id.desc())
        .first()
    )


def get_active_pickings(db: Session) -> List[Picking]:
    return db.query(Picking).filter(Picking.end_timestamp.is_(None)).all()


def get_active_pickings_for_worker(db: Session, worker_id: int) -> List[Picking]:
    return (
        db.query(Picking)
        .filter(Picking.worker_id == worker_id, Picking.end_timestamp.is_(None))
        .order_by(Picking.id.desc())
        .all()
    )


def available_work_types(active: List[Picking]) -> List[WorkType]:
    """
    Work types whose open record count is still below capacity.
    Only reports; starting a task is never refused because of this.
    """
    counts = {work_type: 0 for work_type in WorkType}
    for picking in active:
        try:
            counts[WorkType(picking.work_type)] += 1
        except ValueError:
            logger.warning(f"Picking {picking.id} has unknown work type '{picking.work_type}'")
    return [
        work_type for work_type in WorkType
        if counts[work_type] < WORK_TYPE_CAPACITY[work_type]
    ]


def get_pickings_with_names(
    db: Session,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    with_subtask_only: bool = False
) -> List[Tuple[Picking, str]]:
    """
    Pickings started strictly inside the window, joined with the worker name.
    Rows of deleted workers drop out of the join.
    """
    start, end = report_window(from_date, to_date)
    query = (
        db.query(Picking, Worker.name)
        .join(Worker, Picking.worker_id == Worker.id)
        .filter(Picking.start_timestamp > start, Picking.start_timestamp < end)
    )
    if with_subtask_only:
        query = query.filter(Picking.subtask.isnot(None))
    return [(picking, name) for picking, name in query.order_by(Picking.id.desc()).all()]


def get_pickings_for_day(db: Session, worker_id: int, day: date) -> List[Picking]:
    day_start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    day_end = day_start + timedelta(days=1)
    return (
        db.query(Picking)
        .filter(
            Picking.worker_id == worker_id,
            Picking.start_timestamp >= day_start,
            Picking.start_timestamp < day_end
        )
        .all()
    )
