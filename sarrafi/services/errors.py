class WorkflowError(ValueError):
    """A business rule refused the operation; the message is shown to the user."""
    status_code = 400


class NotFoundError(WorkflowError):
    status_code = 404


class InvalidStateError(WorkflowError):
    pass


class InsufficientBalanceError(WorkflowError):
    pass


class PermissionDeniedError(WorkflowError):
    status_code = 403
