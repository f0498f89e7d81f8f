"""
lifeclock/config.py - Profile, Preferences and Persisted State

Pydantic models for everything the host application stores between
sessions and hands to the engine as plain parameters:
- UserProfile: birth date, gender, country, optional income percentile
- MilestonePreferences: which milestones/holidays to count
- StoredState: versioned blob wrapping both, serialized as camelCase JSON

The engine never touches storage itself; the host reads a blob, calls
StoredState.from_blob(), and writes StoredState.to_blob() back. An unreadable
blob or an unknown version degrades to defaults rather than raising.

Author: LifeClock Project
License: MIT
"""

from datetime import datetime
from typing import List, Literal, Optional
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .holidays import HolidayDefinition
from .life_expectancy import normalize_gender
from .milestones import MilestoneType

logger = logging.getLogger(__name__)

STATE_VERSION = 1

DEFAULT_MILESTONES = ['birthdays', 'summers', 'weekends']
DEFAULT_HOLIDAYS = ['christmas', 'thanksgiving']


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserProfile(_CamelModel):
    """Who the clock is for."""
    birthday: datetime
    gender: str
    country: str = Field(..., min_length=2)
    income_percentile: Optional[int] = Field(default=None, ge=1, le=100)

    @field_validator('gender')
    @classmethod
    def _check_gender(cls, value: str) -> str:
        normalized = normalize_gender(value)
        if normalized is None:
            raise ValueError(f"gender must be male, female or other, got {value!r}")
        return normalized

    @field_validator('country')
    @classmethod
    def _upper_country(cls, value: str) -> str:
        return value.strip().upper()


class MilestonePreferences(_CamelModel):
    """What the milestone counter should show."""
    selected_milestones: List[str] = Field(default_factory=lambda: list(DEFAULT_MILESTONES))
    selected_holidays: List[str] = Field(default_factory=lambda: list(DEFAULT_HOLIDAYS))
    custom_holidays: List[HolidayDefinition] = Field(default_factory=list)
    show_motivational: bool = True
    view_mode: Literal['remaining', 'comparison'] = 'remaining'

    @field_validator('selected_milestones')
    @classmethod
    def _drop_unknown_milestones(cls, value: List[str]) -> List[str]:
        known = {m.value for m in MilestoneType}
        unknown = [m for m in value if m not in known]
        if unknown:
            logger.warning(f"Dropping unknown milestone types: {unknown}")
        return [m for m in value if m in known]


class StoredState(_CamelModel):
    """Versioned key-value blob persisted by the host."""
    version: int = STATE_VERSION
    profile: Optional[UserProfile] = None
    preferences: MilestonePreferences = Field(default_factory=MilestonePreferences)
    last_updated: Optional[datetime] = None

    def to_blob(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_blob(cls, blob: Optional[str]) -> 'StoredState':
        """
        Parse a stored blob.

        Args:
            blob: JSON text as previously produced by to_blob(), or None

        Returns:
            The stored state, or a default StoredState if the blob is
            missing, unreadable, or from another version
        """
        if not blob:
            return cls()

        try:
            state = cls.model_validate_json(blob)
        except ValidationError as exc:
            logger.warning(f"Ignoring unreadable stored state: {exc}")
            return cls()

        if state.version != STATE_VERSION:
            logger.warning(f"Ignoring stored state version {state.version} "
                           f"(expected {STATE_VERSION})")
            return cls()
        return state
