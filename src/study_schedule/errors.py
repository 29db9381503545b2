from __future__ import annotations

from typing import Optional


class StudyScheduleError(Exception):
    """Base class for errors raised by the study schedule backend."""


class StoreError(StudyScheduleError):
    """A record store operation (insert/select/delete) failed."""


class UpstreamError(StudyScheduleError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status {self.status_code})"


class ParseError(StudyScheduleError):
    """The model response did not contain a usable list of materials."""


class ValidationError(StudyScheduleError):
    """A required user selection or input is missing."""


class InvalidTransition(StudyScheduleError):
    pass


class RequestInFlight(StudyScheduleError):
    pass
