# masjid_board/services/iqamaah/errors.py

class IqamaahError(Exception):
    """Base class for every failure raised by the Iqamaah engine."""
    http_status = 400


class InvalidDateFormat(IqamaahError):
    """A date was not given as YYYY-MM-DD or M/D/YYYY, or names an impossible day."""


class InvalidRange(IqamaahError):
    """A window's startDate falls after its endDate."""


class InvalidTime(IqamaahError):
    """A congregation time is not a 24-hour H:mm / HH:mm clock string."""


class UnknownPrayer(IqamaahError):
    """The prayer name is not one of the five categories or a known alias."""


class InvalidPeriod(IqamaahError):
    """The requested year or month is outside the supported range."""


class InvalidPayload(IqamaahError):
    """A bulk payload is missing a category or carries a non-list value."""


class NotFound(IqamaahError):
    """No Iqamaah aggregate has been stored yet."""
    http_status = 404


class StorageError(IqamaahError):
    """The persistence layer failed while reading or writing the aggregate."""
    http_status = 500


class ConcurrentUpdateError(StorageError):
    """Another writer changed the aggregate between our read and our write."""
    http_status = 409
