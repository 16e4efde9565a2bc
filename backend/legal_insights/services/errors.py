# backend/legal_insights/services/errors.py
"""Service-layer errors carrying an HTTP status and a stable code."""
from typing import Optional


class ServiceError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        if code is not None:
            self.code = code


class ValidationFailed(ServiceError):
    status_code = 400
    code = "validation_error"


class AccessDenied(ServiceError):
    status_code = 403
    code = "access_denied"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"


class Conflict(ServiceError):
    status_code = 409
    code = "conflict"


class WorkflowConfigError(ServiceError):
    """The workflow engine URL or shared secret is not configured."""
    status_code = 500
    code = "workflow_not_configured"


class WorkflowError(ServiceError):
    """The workflow engine could not be reached or answered with a non-2xx status."""
    status_code = 502
    code = "workflow_failed"


class StorageError(ServiceError):
    status_code = 502
    code = "storage_failed"
