"""
View state machine for the single-user UI.

States: Dashboard, SettingsLocked, SettingsUnlocked, MaterialsForDate(day).

The settings passcode is a convenience gate for the web client. It is NOT
access control: the code is plain configuration, there is no hashing and no rate
limiting. Deployments that need protection must put real authentication in
front of the settings routes.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence, Union

from study_schedule import config
from study_schedule.errors import InvalidTransition
from study_schedule.models import Material

logger = logging.getLogger(__name__)

INVALID_PASSCODE_MESSAGE = "Invalid passcode. Please try again."


@dataclass(frozen=True)
class Dashboard:
    name: str = "dashboard"


@dataclass(frozen=True)
class SettingsLocked:
    error: Optional[str] = None
    name: str = "settings_locked"


@dataclass(frozen=True)
class SettingsUnlocked:
    name: str = "settings_unlocked"


@dataclass(frozen=True)
class MaterialsForDate:
    day: date
    name: str = "materials_for_date"


ViewState = Union[Dashboard, SettingsLocked, SettingsUnlocked, MaterialsForDate]


class ViewRouter:
    def __init__(self, passcode: Optional[str] = None):
        self._passcode = config.SETTINGS_PASSCODE if passcode is None else passcode
        self.state: ViewState = Dashboard()

    def _require(self, *allowed, action: str) -> None:
        if not isinstance(self.state, allowed):
            raise InvalidTransition(f"cannot {action} from {self.state.name}")

    def open_settings(self) -> ViewState:
        self._require(Dashboard, action="open settings")
        self.state = SettingsLocked()
        return self.state

    def submit_passcode(self, code: str) -> ViewState:
        self._require(SettingsLocked, action="submit a passcode")
        if hmac.compare_digest(code.encode(), self._passcode.encode()):
            self.state = SettingsUnlocked()
        else:
            logger.info("Settings passcode rejected")
            self.state = SettingsLocked(error=INVALID_PASSCODE_MESSAGE)
        return self.state

    def cancel(self) -> ViewState:
        self._require(SettingsLocked, action="cancel")
        self.state = Dashboard()
        return self.state

    def select_date(self, day: date, materials_on_day: Sequence[Material]) -> ViewState:
        """Open the per-date list; days without materials leave the dashboard as is."""
        self._require(Dashboard, action="select a date")
        if materials_on_day:
            self.state = MaterialsForDate(day=day)
        return self.state

    def back(self) -> ViewState:
        self._require(SettingsUnlocked, MaterialsForDate, action="go back")
        self.state = Dashboard()
        return self.state
