class ServiceError(Exception):
    """Failure that maps onto a specific HTTP status for the caller."""

    status = 500

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status


class Unauthorized(ServiceError):
    status = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class BadRequest(ServiceError):
    status = 400


class PayloadTooLarge(ServiceError):
    status = 413

    def __init__(self, message: str = "Request body too large"):
        super().__init__(message)


class UpstreamFetchFailure(ServiceError):
    """The remote server answered, but not with a 2xx (or sent too much)."""

    status = 400

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status

    @classmethod
    def from_status(cls, upstream_status: int) -> "UpstreamFetchFailure":
        return cls(f"Failed to fetch PDF: HTTP {upstream_status}", upstream_status)


def describe(err: BaseException) -> str:
    """Message for the `error` field: str(err), or repr(err) when that's empty."""
    return str(err) or repr(err)
