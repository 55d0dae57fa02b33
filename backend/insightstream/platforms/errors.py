"""Errors raised by platform clients."""

from typing import Optional


class PlatformAPIError(Exception):
    """A vendor API call failed at the transport or HTTP level."""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        self.service = service
        self.status_code = status_code
        super().__init__(message)

    def __str__(self):
        message = super().__str__()
        if self.status_code:
            return f"{self.service} request failed with status {self.status_code}: {message}"
        return f"{self.service} request failed: {message}"
