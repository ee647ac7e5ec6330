"""
Exceptions raised by availability calculation.
"""


class AvailabilityError(Exception):
    """Base class for all availability errors."""


class ServiceNotFoundError(AvailabilityError):
    """Raised when a service is unknown or not open for booking."""

    def __init__(self, service_id):
        super().__init__(f"Service {service_id} not available for booking")
        self.service_id = service_id


class InvalidRangeError(AvailabilityError):
    """Raised when the requested date range cannot be understood."""


class SlotConfigurationError(AvailabilityError):
    """Raised when a service is configured in a way slots cannot be built from."""


class AvailabilityUnavailableError(AvailabilityError):
    """Raised when the data store could not be reached or queried."""
