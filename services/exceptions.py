class ServiceError(Exception):
    """Base class for errors raised by the data access layer"""


class AuthenticationError(ServiceError):
    pass


class WorkerNotFoundError(ServiceError):
    def __init__(self, message: str = "Worker not found"):
        super().__init__(message)


class DuplicateWorkerError(ServiceError):
    pass


class PickingNotFoundError(ServiceError):
    def __init__(self, picking_id: int):
        super().__init__(f"Picking with id {picking_id} not found")
        self.picking_id = picking_id


class PickingClosedError(ServiceError):
    """Closing is terminal; a closed record cannot be closed again"""

    def __init__(self, picking_id: int):
        super().__init__(f"Picking with id {picking_id} is already closed")
        self.picking_id = picking_id


class PickingOwnershipError(ServiceError):
    pass
