# routes/pickings.py
from fastapi import APIRouter, HTTPException, Depends, status, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List, Optional, Union
from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field
import logging

from database import get_db
from models import WorkType
from services import pickings as picking_service
from services import workers as worker_service
from services import reports
from services.data_reports import reconcile_dataset
from services.exceptions import PickingClosedError, PickingNotFoundError, PickingOwnershipError
from utils.permissions import TokenClaims, get_current_user, require_admin

logger = logging.getLogger(__name__)

router = APIRouter()

# Pydantic models for request validation
class PickingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    work_type: WorkType = Field(..., alias="workType")

class PickingAssign(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    worker_id: int = Field(..., alias="workerId")
    work_type: WorkType = Field(..., alias="workType")

class PickingClose(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subtask: Optional[str] = None
    subtask_quantity: Optional[int] = Field(None, alias="subtaskQuantity", ge=0)

class DatasetRowIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    soft_one_id: Union[int, str] = Field(..., alias="softOneId")
    day: date = Field(..., alias="date")
    orders: int
    order_lines: int = Field(..., alias="orderLines")
    units: int

class DatasetUpload(BaseModel):
    rows: List[DatasetRowIn]


def csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )

# ============================================================================
# REPORTS (admin)
# ============================================================================

@router.get("/time")
def get_time_per_worker(
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """Hours worked by each worker in the report window"""
    rows = picking_service.get_pickings_with_names(db, from_date, to_date)
    totals = reports.hours_per_worker(picking for picking, _ in rows)
    return [
        {**worker.to_dict(), "time": totals.get(worker.id, 0.0)}
        for worker in worker_service.list_workers(db)
    ]

@router.get("/time/work-types")
def get_time_per_work_type(
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """Hours per worker name and work type; absent work types are 0"""
    rows = picking_service.get_pickings_with_names(db, from_date, to_date)
    return reports.hours_per_worker_and_work_type(rows)

@router.get("/subtasks")
def get_subtask_summary(
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    rows = picking_service.get_pickings_with_names(db, from_date, to_date, with_subtask_only=True)
    return reports.subtask_summary(picking for picking, _ in rows)

@router.get("/all")
def get_all_pickings(
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    rows = picking_service.get_pickings_with_names(db, from_date, to_date)
    return [{**picking.to_dict(), "worker_name": name} for picking, name in rows]

@router.get("/export")
def export_pickings(
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """One CSV line per picking record in the report window"""
    rows = picking_service.get_pickings_with_names(db, from_date, to_date)
    return csv_response(reports.pickings_to_csv(rows), "pickings.csv")

@router.get("/export/work-types")
def export_work_type_summary(
    from_date: Optional[datetime] = Query(None),
    to_date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    rows = picking_service.get_pickings_with_names(db, from_date, to_date)
    table = reports.hours_per_worker_and_work_type(rows)
    return csv_response(reports.work_type_table_to_csv(table), "work_types.csv")

@router.post("/upload")
def upload_dataset(
    upload: DatasetUpload,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """Reconcile the external system's daily figures with picking hours"""
    rows = [
        reports.DatasetRow(
            soft_one_id=str(row.soft_one_id),
            day=row.day,
            orders=row.orders,
            order_lines=row.order_lines,
            units=row.units
        )
        for row in upload.rows
    ]
    inserted, unmatched = reconcile_dataset(db, rows)
    return {
        "reports": [report.to_dict() for report in inserted],
        "unmatched": unmatched
    }

# ============================================================================
# TASK LIFECYCLE
# ============================================================================

@router.post("/assign")
def assign_picking(
    assignment: PickingAssign,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """Open a task on behalf of any worker"""
    picking = picking_service.create_picking(db, assignment.worker_id, assignment.work_type)
    return picking.to_dict()

@router.get("/")
@router.get("")
def get_my_pickings(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user)
):
    return [picking.to_dict() for picking in picking_service.get_pickings(db, current_user.id)]

@router.get("/work")
def get_available_work(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user)
):
    """Work types that are still below their capacity of open tasks"""
    active = picking_service.get_active_pickings(db)
    return [work_type.value for work_type in picking_service.available_work_types(active)]

@router.get("/active")
def get_my_active_pickings(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user)
):
    active = picking_service.get_active_pickings_for_worker(db, current_user.id)
    return [picking.to_dict() for picking in active]

@router.get("/latest")
def get_my_latest_picking(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user)
):
    picking = picking_service.get_latest_picking(db, current_user.id)
    return picking.to_dict() if picking else None

@router.get("/worker/{worker_id}")
def get_worker_pickings(
    worker_id: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    return [picking.to_dict() for picking in picking_service.get_pickings(db, worker_id)]

@router.post("/")
@router.post("")
def start_picking(
    picking_data: PickingCreate,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user)
):
    """Open a task for the calling worker"""
    picking = picking_service.create_picking(db, current_user.id, picking_data.work_type)
    return picking.to_dict()

@router.put("/{picking_id}")
def close_picking(
    picking_id: int,
    close_data: Optional[PickingClose] = None,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user)
):
    """Close an open task now, optionally recording subtask and quantity"""
    close_data = close_data or PickingClose()
    try:
        picking = picking_service.close_picking(
            db,
            picking_id,
            worker_id=current_user.id,
            is_admin=current_user.admin,
            subtask=close_data.subtask,
            subtask_quantity=close_data.subtask_quantity
        )
        return picking.to_dict()
    except PickingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PickingOwnershipError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except PickingClosedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.delete("/{picking_id}")
def delete_picking(
    picking_id: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    try:
        picking_service.delete_picking(db, picking_id)
        return {"message": f"Picking with id {picking_id} was deleted"}
    except PickingNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
