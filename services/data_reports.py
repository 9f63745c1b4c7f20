import logging
from typing import Iterable, List, Tuple
from sqlalchemy.orm import Session

from models import DataReport
from services import pickings as picking_service
from services import workers as worker_service
from services.reports import DatasetRow, reconcile_row

logger = logging.getLogger(__name__)


def reconcile_dataset(db: Session, rows: Iterable[DatasetRow]) -> Tuple[List[DataReport], List[str]]:
    """
    Build one data report per dataset row and insert them in one commit.

    Returns:
        (inserted reports, external ids that matched no worker)
    """
    reports: List[DataReport] = []
    unmatched: List[str] = []
    for row in rows:
        worker = worker_service.get_worker_by_soft_one_id(db, row.soft_one_id)
        if worker is None:
            logger.warning(f"No worker with external id {row.soft_one_id}, row skipped")
            if row.soft_one_id not in unmatched:
                unmatched.append(row.soft_one_id)
            continue
        day_pickings = picking_service.get_pickings_for_day(db, worker.id, row.day)
        result = reconcile_row(row, worker.id, day_pickings)
        reports.append(DataReport(
            worker_id=result.worker_id,
            created=result.day,
            orders=result.orders,
            order_lines=result.order_lines,
            units=result.units,
            time_spent=result.time_spent,
            order_lines_per_hour=result.order_lines_per_hour,
            units_per_order_line=result.units_per_order_line
        ))

    if reports:
        db.add_all(reports)
        db.commit()
        for report in reports:
            db.refresh(report)
    logger.info(f"Inserted {len(reports)} data reports, {len(unmatched)} unmatched external ids")
    return reports, unmatched
