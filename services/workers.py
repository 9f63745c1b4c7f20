"""
Worker data access: CRUD over the workers table plus login.
"""

import logging
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from models import Worker
from services.exceptions import AuthenticationError, DuplicateWorkerError, WorkerNotFoundError
from utils.security import hash_password, verify_password, sign_token

logger = logging.getLogger(__name__)


def list_workers(db: Session) -> List[Worker]:
    return db.query(Worker).order_by(Worker.id).all()


def get_worker(db: Session, worker_id: int) -> Worker:
    worker = db.get(Worker, worker_id)
    if worker is None:
        raise WorkerNotFoundError()
    return worker


def get_worker_by_soft_one_id(db: Session, soft_one_id: str) -> Optional[Worker]:
    return db.query(Worker).filter(Worker.soft_one_id == str(soft_one_id)).first()


def get_worker_by_name(db: Session, name: str) -> Optional[Worker]:
    return db.query(Worker).filter(Worker.name == name).first()


def create_worker(
    db: Session,
    name: str,
    password: str,
    soft_one_id: Optional[str] = None,
    admin: bool = False
) -> Worker:
    """Create a worker, storing only the bcrypt hash of the password"""
    worker = Worker(
        soft_one_id=soft_one_id,
        name=name,
        password=hash_password(password),
        admin=admin
    )
    db.add(worker)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateWorkerError(f"Worker with name '{name}' already exists")
    db.refresh(worker)
    logger.info(f"Created worker {worker.id} ({worker.name}, admin={worker.admin})")
    return worker


def update_worker(
    db: Session,
    worker_id: int,
    name: Optional[str] = None,
    password: Optional[str] = None,
    soft_one_id: Optional[str] = None
) -> Worker:
    """Patch a worker; the password is re-hashed only when a new one is supplied"""
    worker = get_worker(db, worker_id)
    if name is not None:
        worker.name = name
    if soft_one_id is not None:
        worker.soft_one_id = soft_one_id
    if password:
        worker.password = hash_password(password)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateWorkerError(f"Worker with name '{name}' already exists")
    db.refresh(worker)
    return worker


def delete_worker(db: Session, worker_id: int) -> None:
    # Picking rows of the worker are left untouched
    worker = get_worker(db, worker_id)
    db.delete(worker)
    db.commit()
    logger.info(f"Deleted worker {worker_id}")


def login(db: Session, name: str, password: str) -> Tuple[str, Worker]:
    """
    Check credentials and issue a session token.

    Returns:
        (token, worker)

    Raises:
        AuthenticationError: unknown name or wrong password
    """
    worker = get_worker_by_name(db, name)
    if worker is None:
        raise AuthenticationError("No worker found with given name")
    if not verify_password(password, worker.password):
        logger.info(f"Failed login for worker {worker.id}")
        raise AuthenticationError("Invalid credentials")
    token = sign_token(worker.id, worker.admin)
    return token, worker


def ensure_admin(db: Session, name: str, password: str) -> Worker:
    """Create the admin account on first startup; an existing one is left as is"""
    existing = get_worker_by_name(db, name)
    if existing is not None:
        if not existing.admin:
            logger.warning(f"Worker '{name}' already exists without admin rights, no admin seeded")
        return existing
    return create_worker(db, name=name, password=password, admin=True)
