from __future__ import annotations


class WorkbenchError(Exception):
    """Base error for the workbench client."""


class TransportError(WorkbenchError):
    """The API could not be reached or answered outside the envelope contract.

    Covers network failures, timeouts, non-2xx statuses and bodies that are
    not JSON envelopes. Logical failures (``{"success": false}``) are not
    transport errors; they come back as a failed ``Envelope``.
    """

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
