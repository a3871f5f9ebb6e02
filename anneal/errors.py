"""Fatal error types raised by the simulation engines."""


class AnnealError(Exception):
    """Base class for unrecoverable simulation failures."""

    pass


class HostAllocationError(AnnealError):
    """Raised when the host grid buffers cannot be allocated."""

    pass


class DeviceAllocationError(AnnealError):
    """Raised when the compute device runs out of memory."""

    pass


class DeviceExecutionError(AnnealError):
    """Raised when a kernel launch, execution or transfer fails.

    ``operation`` names the step that failed (``upload``, ``boundary_kernel``,
    ``anneal_kernel``, ``synchronize`` or ``download``).
    """

    def __init__(self, operation: str, detail: str):
        super().__init__(f"{operation}: {detail}")
        self.operation = operation
        self.detail = detail
