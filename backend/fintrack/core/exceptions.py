"""Custom exception classes for the application."""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class AlreadyExistsError(HTTPException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{resource} already exists",
        )


class InvalidArgumentError(HTTPException):
    def __init__(self, detail: str = "Invalid argument"):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )


class TransportFailureError(HTTPException):
    """The data store is unreachable or rejected the operation."""

    def __init__(self, operation: str = "Store operation"):
        self.operation = operation
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{operation} failed, please retry",
        )


class PartialBatchFailureError(HTTPException):
    """Some child expenses of an installment could not be written.

    The parent installment exists; the caller must reconcile (discard the
    installment or complete the missing children), never re-run the batch.
    """

    def __init__(self, installment_id: int, created: int, failed: int):
        self.installment_id = installment_id
        self.created = created
        self.failed = failed
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": f"Installment {installment_id} was only partially created",
                "installment_id": installment_id,
                "created": created,
                "failed": failed,
            },
        )
