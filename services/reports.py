"""
Report folds over picking rows.

Every function takes rows already loaded by services.pickings and makes a
single pass over them. Durations are in hours; a record without an end
timestamp counts as zero hours (its end defaults to its start).
"""

import csv
import io
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Mapping, Optional, Tuple

from models import Picking, WorkType

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600

CSV_HEADER = ["worker", "work_type", "hours", "subtask", "subtask_quantity"]

PickingRow = Tuple[Picking, str]


def picking_hours(picking: Picking) -> float:
    end = picking.end_timestamp or picking.start_timestamp
    return (end - picking.start_timestamp).total_seconds() / SECONDS_PER_HOUR


def empty_work_type_table() -> Dict[str, float]:
    return {work_type.value: 0.0 for work_type in WorkType}


def hours_per_worker(pickings: Iterable[Picking]) -> Dict[int, float]:
    totals: Dict[int, float] = {}
    for picking in pickings:
        totals[picking.worker_id] = totals.get(picking.worker_id, 0.0) + picking_hours(picking)
    return totals


def hours_per_worker_and_work_type(rows: Iterable[PickingRow]) -> Dict[str, Dict[str, float]]:
    """{worker name: {work type: hours}} with every work type present"""
    table: Dict[str, Dict[str, float]] = {}
    for picking, worker_name in rows:
        per_type = table.setdefault(worker_name, empty_work_type_table())
        if picking.work_type not in per_type:
            logger.warning(f"Picking {picking.id} has unknown work type '{picking.work_type}'")
            continue
        per_type[picking.work_type] += picking_hours(picking)
    return table


def subtask_summary(pickings: Iterable[Picking]) -> Dict[str, Dict[str, float]]:
    """Total quantity and hours per subtask, for records that carry one"""
    summary: Dict[str, Dict[str, float]] = {}
    for picking in pickings:
        if picking.subtask is None:
            continue
        entry = summary.setdefault(picking.subtask, {"quantity": 0, "hours": 0.0})
        entry["quantity"] += picking.subtask_quantity or 0
        entry["hours"] += picking_hours(picking)
    return summary


def pickings_to_csv(rows: Iterable[PickingRow]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for picking, worker_name in rows:
        writer.writerow([
            worker_name,
            picking.work_type,
            round(picking_hours(picking), 2),
            picking.subtask,
            picking.subtask_quantity,
        ])
    return buffer.getvalue()


def work_type_table_to_csv(table: Mapping[str, Mapping[str, float]]) -> str:
    work_types = [work_type.value for work_type in WorkType]
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["worker"] + work_types)
    for worker_name, per_type in table.items():
        writer.writerow([worker_name] + [round(per_type.get(wt, 0.0), 2) for wt in work_types])
    return buffer.getvalue()


@dataclass
class DatasetRow:
    """One row of the external inventory system's daily export"""
    soft_one_id: str
    day: date
    orders: int
    order_lines: int
    units: int


@dataclass
class ReconciledReport:
    worker_id: int
    day: date
    orders: int
    order_lines: int
    units: int
    time_spent: float
    order_lines_per_hour: Optional[float]
    units_per_order_line: Optional[float]


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    if not denominator:
        return None
    return numerator / denominator


def reconcile_row(row: DatasetRow, worker_id: int, day_pickings: Iterable[Picking]) -> ReconciledReport:
    """
    Combine one dataset row with the worker's pickings of that day.
    Only picking-type hours count as time spent. A ratio with a zero
    denominator is reported as None.
    """
    hours = sum(
        picking_hours(picking) for picking in day_pickings
        if picking.work_type == WorkType.PICKING.value
    )
    order_lines_per_hour = _ratio(row.order_lines, hours)
    units_per_order_line = _ratio(row.order_lines, row.units)
    if order_lines_per_hour is None or units_per_order_line is None:
        logger.warning(
            f"Undefined ratio for worker {worker_id} on {row.day.isoformat()} "
            f"(hours={hours}, units={row.units})"
        )
    return ReconciledReport(
        worker_id=worker_id,
        day=row.day,
        orders=row.orders,
        order_lines=row.order_lines,
        units=row.units,
        time_spent=hours,
        order_lines_per_hour=order_lines_per_hour,
        units_per_order_line=units_per_order_line,
    )

