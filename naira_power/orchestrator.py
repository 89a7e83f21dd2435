"""
Main Orchestrator for Naira Power

This module ties together all the components and defines the flows a
front end drives:
1. Sign in (email -> user -> session)
2. Onboarding (create a family, or join one by invite code)
3. Recharges (record, list, delete)
4. Insight (statistics and the AI summary)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every action names the acting user, who must be the signed-in user
- A user only sees and changes logs of the family their record points at
- Failures a user can fix come back as messages, not exceptions
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from pydantic import ValidationError

from naira_power.agents import UsageInsightAgent, fallback_analysis
from naira_power.audit import AuditLogger
from naira_power.config import AppSettings, get_settings
from naira_power.models.household import (
    AnalysisResult,
    Family,
    FamilyActionResult,
    LogActionResult,
    UsageStats,
    User,
)
from naira_power.queries import compute_usage_stats
from naira_power.services.family import FamilyService
from naira_power.services.identity import IdentityService
from naira_power.services.logs import LogService
from naira_power.services.session import SessionHolder, SessionMismatchError
from naira_power.services.storage import (
    InMemoryMedium,
    JsonFileMedium,
    KeyValueAuditStorage,
    KeyValueFamilyStorage,
    KeyValueLogStorage,
    KeyValueMedium,
    KeyValueSessionStorage,
    KeyValueUserStorage,
    RecordStore,
)


INVALID_INVITE_CODE_MESSAGE = (
    "Invalid invite code. Please ask the family admin for the correct code."
)
MISSING_FAMILY_NAME_MESSAGE = "Please enter a name for your family."
NO_FAMILY_MESSAGE = "You are not part of a family yet. Create or join one first."
INVALID_LOG_MESSAGE = "Please enter a valid date and non-negative numbers."
FOREIGN_LOG_MESSAGE = "That record belongs to another family."


class NoFamilyError(Exception):
    """The signed-in user has no (existing) family."""
    pass


class HouseholdApp:
    """
    Front-end facing flows over the household services.

    Every method that acts for a user takes that user's id and checks it
    against the session first.
    """

    def __init__(
        self,
        identity: IdentityService,
        families: FamilyService,
        sessions: SessionHolder,
        logs: LogService,
        insight_agent: Optional[UsageInsightAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.identity = identity
        self.families = families
        self.sessions = sessions
        self.logs = logs
        self._insight_agent = insight_agent
        self._audit_logger = audit_logger

    # -------------------------------------------------------------------------
    # Sign in / out
    # -------------------------------------------------------------------------

    def sign_in(self, email: str, name: Optional[str] = None) -> User:
        """Find or register the user and make them the signed-in user."""
        user = self.identity.get_or_register_user(email, name)
        self.sessions.save_session(user)
        return user

    def sign_out(self) -> None:
        self.sessions.clear_session()

    def current_user(self) -> Optional[User]:
        return self.sessions.get_session()

    def current_family(self) -> Optional[Family]:
        user = self.current_user()
        if user is None or user.family_id is None:
            return None
        return self.families.get_family(user.family_id)

    def family_members(self, user_id: str) -> list[User]:
        try:
            _, family = self._require_family(user_id)
        except (SessionMismatchError, NoFamilyError):
            return []
        return self.families.get_members(family)

    # -------------------------------------------------------------------------
    # Onboarding
    # -------------------------------------------------------------------------

    def create_family(self, name: str, user_id: str) -> FamilyActionResult:
        try:
            user = self.sessions.require_user(user_id)
        except SessionMismatchError as e:
            return FamilyActionResult(error=e.message)

        if not name or not name.strip():
            return FamilyActionResult(error=MISSING_FAMILY_NAME_MESSAGE)

        family = self.families.create_family(name.strip(), user)
        return FamilyActionResult(
            family=family,
            user=self.identity.get_user(user.id),
        )

    def join_family(self, invite_code: str, user_id: str) -> FamilyActionResult:
        try:
            user = self.sessions.require_user(user_id)
        except SessionMismatchError as e:
            return FamilyActionResult(error=e.message)

        family = self.families.join_family(invite_code, user)
        if family is None:
            return FamilyActionResult(error=INVALID_INVITE_CODE_MESSAGE)

        return FamilyActionResult(
            family=family,
            user=self.identity.get_user(user.id),
        )

    # -------------------------------------------------------------------------
    # Recharges
    # -------------------------------------------------------------------------

    def _require_family(self, user_id: str) -> tuple[User, Family]:
        user = self.sessions.require_user(user_id)
        family = (
            self.families.get_family(user.family_id)
            if user.family_id is not None
            else None
        )
        if family is None:
            raise NoFamilyError(NO_FAMILY_MESSAGE)
        return user, family

    def family_logs(self, user_id: str) -> LogActionResult:
        try:
            _, family = self._require_family(user_id)
        except SessionMismatchError as e:
            return LogActionResult(error=e.message)
        except NoFamilyError as e:
            return LogActionResult(error=str(e))

        return LogActionResult(logs=self.logs.get_logs(family.id))

    def record_recharge(
        self,
        user_id: str,
        date: date,
        units: float,
        amount: Union[Decimal, float, str],
        previous_reading: float,
    ) -> LogActionResult:
        try:
            user, family = self._require_family(user_id)
        except SessionMismatchError as e:
            return LogActionResult(error=e.message)
        except NoFamilyError as e:
            return LogActionResult(error=str(e))

        try:
            log = self.logs.new_log(
                family_id=family.id,
                user=user,
                date=date,
                units=units,
                amount=amount,
                previous_reading=previous_reading,
            )
        except (ValidationError, ArithmeticError):
            return LogActionResult(
                logs=self.logs.get_logs(family.id),
                error=INVALID_LOG_MESSAGE,
            )

        return LogActionResult(logs=self.logs.add_log(log))

    def remove_log(self, user_id: str, log_id: str) -> LogActionResult:
        try:
            _, family = self._require_family(user_id)
        except SessionMismatchError as e:
            return LogActionResult(error=e.message)
        except NoFamilyError as e:
            return LogActionResult(error=str(e))

        log = self.logs.get_log(log_id)
        if log is not None and log.family_id != family.id:
            return LogActionResult(
                logs=self.logs.get_logs(family.id),
                error=FOREIGN_LOG_MESSAGE,
            )

        return LogActionResult(logs=self.logs.delete_log(log_id, family.id))

    # -------------------------------------------------------------------------
    # Insight
    # -------------------------------------------------------------------------

    def usage_stats(self, user_id: str) -> UsageStats:
        """Statistics over the user's family logs (zeros if none are visible)."""
        return compute_usage_stats(self.family_logs(user_id).logs)

    async def analyze(self, user_id: str) -> AnalysisResult:
        """AI summary of the user's family logs; the fallback if unavailable."""
        result = self.family_logs(user_id)
        if not result.ok:
            return fallback_analysis()

        if self._insight_agent is None:
            self._insight_agent = UsageInsightAgent(audit_logger=self._audit_logger)

        user = self.current_user()
        return await self._insight_agent.analyze_usage(
            result.logs,
            family_id=user.family_id if user else None,
        )


def create_medium(settings: AppSettings) -> KeyValueMedium:
    """Build the configured key-value medium."""
    if settings.storage_backend == "memory":
        return InMemoryMedium()
    return JsonFileMedium(settings.storage_path)


def create_app_components(
    settings: Optional[AppSettings] = None,
    medium: Optional[KeyValueMedium] = None,
    insight_agent: Optional[UsageInsightAgent] = None,
) -> HouseholdApp:
    """
    Factory function to create all application components.

    Args:
        settings: Application settings; loaded from the environment when None.
        medium: Key-value medium to use instead of the configured one.
        insight_agent: Agent to use instead of a Gemini-backed one.

    Returns:
        A HouseholdApp wired to a single record store
    """
    settings = settings or get_settings().app
    store = RecordStore(medium or create_medium(settings))

    users = KeyValueUserStorage(store)
    families = KeyValueFamilyStorage(store)
    logs = KeyValueLogStorage(store)
    audit_logger = AuditLogger(
        KeyValueAuditStorage(store, max_events=settings.audit_max_events)
    )

    identity = IdentityService(
        users=users,
        families=families,
        logs=logs,
        audit_logger=audit_logger,
        demo_email=settings.demo_email,
    )
    family_service = FamilyService(
        families=families,
        users=users,
        audit_logger=audit_logger,
        invite_code_length=settings.invite_code_length,
        invite_code_attempts=settings.invite_code_attempts,
    )
    sessions = SessionHolder(
        storage=KeyValueSessionStorage(store),
        users=users,
        audit_logger=audit_logger,
    )
    log_service = LogService(logs, audit_logger=audit_logger)

    if insight_agent is None:
        insight_agent = UsageInsightAgent(
            audit_logger=audit_logger,
            log_window=settings.insight_log_window,
        )

    return HouseholdApp(
        identity=identity,
        families=family_service,
        sessions=sessions,
        logs=log_service,
        insight_agent=insight_agent,
        audit_logger=audit_logger,
    )
