"""
Exceptions for the core module.

Resolution errors abort a whole batch before anything is sent, transport
errors carry the backend's decoded body so callers can reinterpret it.
"""

from typing import Any

import sentry_sdk


class DatasourceException(Exception):
    """Base class for the errors raised by the query layer"""


class UnknownDatasourceError(DatasourceException):
    def __init__(self, name: str | None) -> None:
        self.name = name
        super().__init__(f"Unknown Datasource: {name}")


class FetchError(DatasourceException):
    """A failed call to the backend, with the decoded error body if there was one"""

    def __init__(
        self,
        status: int,
        data: Any = None,
        status_text: str = "",
        url: str | None = None,
    ) -> None:
        self.status = status
        self.data = data
        self.status_text = status_text
        self.url = url
        # set by callers that already turned the failure into a user-facing value
        self.is_handled = False
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if isinstance(self.data, dict) and self.data.get("message"):
            return str(self.data["message"])
        return self.status_text or f"Request failed with status {self.status}"


def handle_exception(
    status: int,
    status_text: str,
    data: Any,
    url: str,
    request_id: str | None = None,
):
    """Report a transport failure to Sentry and raise it as a FetchError."""
    error = FetchError(status, data, status_text, url)
    if sentry_sdk.get_client().is_active():
        with sentry_sdk.new_scope() as scope:
            sentry_tags: dict = {
                "status": status,
                "url": url,
            }
            if request_id:
                sentry_tags["request_id"] = request_id
            scope.set_tags(sentry_tags)
            sentry_sdk.capture_exception(error)
    raise error
