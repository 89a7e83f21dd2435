"""
Core Data Models for Naira Power

These models define the strict schemas for everything kept in the record set.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging
4. Carry the family membership invariants with the data itself

DESIGN DECISION: We use Pydantic v2 models for every stored entity.
Families re-check their membership rules each time they are validated,
so the storage layer can enforce them simply by validating before writing.
"""

import datetime as dt
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# PEOPLE AND FAMILIES
# =============================================================================

class User(BaseModel):
    """
    A person who signs in by email.

    The id is the lowercased email. Only ``name`` and ``family_id``
    change after the record is created.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Lowercased email address"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    email: str = Field(
        ...,
        min_length=1,
        description="Email address (lowercased)"
    )
    avatar: str = Field(
        default="",
        description="Avatar image URL"
    )
    family_id: Optional[str] = Field(
        default=None,
        description="Family this user currently belongs to"
    )

    @property
    def has_family(self) -> bool:
        return self.family_id is not None


class Family(BaseModel):
    """
    A group of users sharing one pool of utility logs.

    INVARIANTS (checked on every validation):
    - creator_id is always one of member_ids
    - member_ids holds no duplicates
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Family identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Family display name"
    )
    creator_id: str = Field(
        ...,
        min_length=1,
        description="User who created the family"
    )
    invite_code: str = Field(
        ...,
        pattern="^[A-Z0-9]+$",
        description="Shared code other members use to join"
    )
    member_ids: list[str] = Field(
        default_factory=list,
        description="Members in join order"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the family was created"
    )

    @model_validator(mode='after')
    def validate_membership(self) -> 'Family':
        """Validate membership rules."""
        if len(set(self.member_ids)) != len(self.member_ids):
            raise ValueError("Family members must be unique")

        if self.creator_id not in self.member_ids:
            raise ValueError("Family creator must be a member")

        return self

    def has_member(self, user_id: str) -> bool:
        return user_id in self.member_ids


# =============================================================================
# UTILITY LOGS
# =============================================================================

class UtilityLog(BaseModel):
    """
    A single electricity recharge recorded by a family member.

    Logs are immutable once created. The only way to change one is to
    delete it and record it again.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        frozen=True,
        allow_inf_nan=False,
    )

    id: str = Field(
        default_factory=lambda: uuid4().hex,
        description="Log identifier"
    )
    family_id: str = Field(
        ...,
        min_length=1,
        description="Family the log belongs to"
    )
    user_id: str = Field(
        ...,
        min_length=1,
        description="User who recorded the recharge"
    )
    user_name: str = Field(
        ...,
        description="Display name of that user at recording time"
    )
    date: dt.date = Field(
        ...,
        description="Day the recharge happened"
    )
    units: float = Field(
        ...,
        ge=0,
        description="Units bought (kWh)"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount paid (NGN)"
    )
    previous_reading: float = Field(
        ...,
        ge=0,
        description="Meter reading before the recharge"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the log was recorded"
    )

    @field_validator('created_at')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Timestamps without a zone are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class UsageStats(BaseModel):
    """Aggregated spending figures for a set of logs."""

    log_count: int = Field(ge=0)
    total_spent: Decimal = Field(ge=0)
    total_units: float = Field(ge=0)
    average_recharge: Decimal = Field(
        ge=0,
        description="Average amount per recharge (0 when there are no logs)"
    )


class AnalysisResult(BaseModel):
    """
    AI-generated reading of a family's usage.

    Exactly three tips are required; anything else is treated as a
    malformed response.
    """

    summary: str = Field(
        ...,
        min_length=1,
        description="Brief summary of the spending trend"
    )
    tips: list[str] = Field(
        ...,
        min_length=3,
        max_length=3,
        description="Three actionable saving tips"
    )

    @field_validator('tips')
    @classmethod
    def validate_tips(cls, v: list[str]) -> list[str]:
        cleaned = [tip.strip() for tip in v]
        if any(not tip for tip in cleaned):
            raise ValueError("Tips cannot be blank")
        return cleaned


# =============================================================================
# FLOW RESULTS
# =============================================================================

class FamilyActionResult(BaseModel):
    """
    Outcome of creating or joining a family.

    Either ``family`` is set, or ``error`` holds a message for the user.
    """

    family: Optional[Family] = None
    user: Optional[User] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class LogActionResult(BaseModel):
    """Outcome of a log operation: the refreshed family view or an error."""

    logs: list[UtilityLog] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
