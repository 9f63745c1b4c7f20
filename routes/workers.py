"""
Picking Tracker Backend - Worker Routes
Login, token validation and admin worker management
"""

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session
from database import get_db
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
import logging

from services import workers as worker_service
from services.exceptions import AuthenticationError, DuplicateWorkerError, WorkerNotFoundError
from utils.permissions import TokenClaims, get_bearer_token, require_admin
from utils.security import MAX_PASSWORD_BYTES, is_token_valid

logger = logging.getLogger(__name__)

# Router
router = APIRouter()

def check_password_length(value: str) -> str:
    # bcrypt only accepts up to 72 bytes of input
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return value

# Request Models
class LoginRequest(BaseModel):
    name: str
    password: str

class WorkerCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    soft_one_id: Optional[str] = Field(None, alias="softOneId")
    admin: bool = False

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_length(value)

class WorkerUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = None
    soft_one_id: Optional[str] = Field(None, alias="softOneId")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: Optional[str]) -> Optional[str]:
        return check_password_length(value) if value is not None else value

# Routes

@router.get("/")
@router.get("")  # Handle both with and without trailing slash
def get_workers(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """Get all workers, without password hashes"""
    try:
        return [worker.to_dict() for worker in worker_service.list_workers(db)]
    except Exception as e:
        logger.error(f"Error fetching workers: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to retrieve workers: {str(e)}"
        )

@router.post("/login")
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Login with name and password, returns a 24h session token"""
    try:
        token, worker = worker_service.login(db, login_data.name, login_data.password)
        return {"token": token, "user": worker.to_dict()}
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/token_validation")
def token_validation(token: str = Depends(get_bearer_token)):
    """Report whether the bearer token is still valid"""
    return {"isValid": is_token_valid(token)}

@router.get("/external/{soft_one_id}")
def get_worker_by_external_id(
    soft_one_id: str,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """Get worker by id of the external inventory system"""
    worker = worker_service.get_worker_by_soft_one_id(db, soft_one_id)
    if worker is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Worker with external id {soft_one_id} not found"
        )
    return worker.to_dict()

@router.get("/{worker_id}")
def get_worker_by_id(
    worker_id: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    try:
        return worker_service.get_worker(db, worker_id).to_dict()
    except WorkerNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.post("/")
@router.post("")
def create_worker(
    worker_data: WorkerCreateRequest,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """Create a worker; the password is stored hashed"""
    try:
        worker = worker_service.create_worker(
            db,
            name=worker_data.name,
            password=worker_data.password,
            soft_one_id=worker_data.soft_one_id,
            admin=worker_data.admin
        )
        return worker.to_dict()
    except DuplicateWorkerError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.put("/{worker_id}")
def update_worker(
    worker_id: int,
    worker_data: WorkerUpdateRequest,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """Update name, external id and/or password; omitted fields are kept"""
    try:
        worker = worker_service.update_worker(
            db,
            worker_id,
            name=worker_data.name,
            password=worker_data.password,
            soft_one_id=worker_data.soft_one_id
        )
        return worker.to_dict()
    except WorkerNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateWorkerError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

@router.delete("/{worker_id}")
def delete_worker(
    worker_id: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    try:
        worker_service.delete_worker(db, worker_id)
        return {"message": "Successfully deleted worker"}
    except WorkerNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
