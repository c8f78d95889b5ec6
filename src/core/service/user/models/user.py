"""
User record model shared by the admin and profile APIs.

Wire and storage names are camelCase (the mobile app reads the same
documents); Python attributes are snake_case.
"""

import calendar
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    EXPERT = "expert"


class UserPlan(str, Enum):
    BASIC = "basic"
    PREMIUM = "premium"
    PRO = "pro"


class UserStatus(str, Enum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    SUSPENDED = "suspended"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class SubscriptionDuration(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


VALID_ROLES = {role.value for role in UserRole}
VALID_PLANS = {plan.value for plan in UserPlan}
VALID_STATUSES = {status.value for status in UserStatus}

DURATION_MONTHS = {
    SubscriptionDuration.MONTHLY.value: 1,
    SubscriptionDuration.YEARLY.value: 12,
}

# Fields a user may change on their own profile
SELF_SERVICE_FIELDS = (
    "userName",
    "userPhone",
    "userAddress",
    "gender",
    "dob",
    "about",
    "userImage",
)

# Stored as native timestamps, exposed as ISO strings
STORAGE_TIMESTAMP_FIELDS = (
    "lastCreditReset",
    "subscriptionStartDate",
    "subscriptionEndDate",
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """Render a datetime as a millisecond precision UTC ISO-8601 string."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic, clamping to the last day of the target month."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _advance(moment: datetime, duration: Optional[str]) -> datetime:
    months = DURATION_MONTHS.get(duration)
    if months is None:
        return moment
    return add_months(moment, months)


FLAG_FIELDS = {"is_online", "auto_renewal"}
COUNT_FIELDS = {"credits"}
MAP_FIELDS = {"user_image"}
LIST_FIELDS = {
    "selected_payment_methods",
    "payment_history",
    "notification",
    "bookmarks",
    "my_plants",
    "diagnosis_history",
    "post_article",
}

_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no", ""}

# Marker for a stored or submitted value that cannot be read as its field's type
_UNUSABLE = object()


def _coerce_field(name: str, value: Any) -> Any:
    """
    Bring a raw stored or submitted value to its field's shape.

    Returns ``_UNUSABLE`` when nothing sensible can be made of it, in which
    case the field keeps its default. Rule checks happen later in
    ``validate_for_persistence``, never here.
    """
    if name in FLAG_FIELDS:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
        return _UNUSABLE

    if name in COUNT_FIELDS:
        if isinstance(value, bool):
            return _UNUSABLE
        if isinstance(value, (int, float, str)):
            try:
                return int(value.strip() if isinstance(value, str) else value)
            except (ValueError, OverflowError):
                return _UNUSABLE
        return _UNUSABLE

    if name in MAP_FIELDS:
        return value if isinstance(value, dict) else _UNUSABLE

    if name in LIST_FIELDS:
        if isinstance(value, (list, tuple)):
            return list(value)
        return _UNUSABLE

    # Everything else is text
    if isinstance(value, str):
        return value
    # Firestore hands back DatetimeWithNanoseconds, a datetime subclass
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, (int, float, bool)):
        return str(value)
    return _UNUSABLE


class UserRecord(BaseModel):
    """Stored representation of one user, admin or expert."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # Identity
    user_id: Optional[str] = None

    # Profile
    user_name: Optional[str] = None
    user_image: Optional[Dict[str, Any]] = None  # label -> image URL or nested image data
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    user_address: Optional[str] = None
    gender: Optional[str] = None
    dob: Optional[str] = None
    about: str = ""

    # Classification (kept as plain strings so bad values reach the validator)
    plan: str = UserPlan.BASIC.value
    status: str = UserStatus.UNVERIFIED.value
    role: str = UserRole.USER.value

    # Device / presence
    otp: Optional[str] = None
    fcm_token: Optional[str] = None
    is_online: bool = False
    last_active: Optional[str] = None

    # Credits
    credits: int = 0
    last_credit_reset: Optional[str] = None

    # Engagement collections, passed through untouched
    selected_payment_methods: List[Any] = []
    payment_history: List[Any] = []
    notification: List[Any] = []
    bookmarks: List[Any] = []
    my_plants: List[Any] = []
    diagnosis_history: List[Any] = []
    post_article: List[Any] = []

    # Subscription
    subscription_status: str = SubscriptionStatus.INACTIVE.value
    subscription_start_date: Optional[str] = None
    subscription_end_date: Optional[str] = None
    subscription_type: Optional[str] = None
    auto_renewal: bool = False

    # Audit
    created_at: str = ""
    updated_at: str = ""

    @model_validator(mode="before")
    @classmethod
    def _apply_defaults(cls, data: Any) -> Any:
        # Null or unusable values mean "absent": the field falls back to its default
        if isinstance(data, dict):
            aliases = {field.alias or name: name for name, field in cls.model_fields.items()}
            cleaned = {}
            for key, value in data.items():
                if value is None:
                    continue
                name = key if key in cls.model_fields else aliases.get(key)
                if name is not None:
                    value = _coerce_field(name, value)
                    if value is _UNUSABLE:
                        continue
                cleaned[key] = value
            data = cleaned

            now = to_iso(utc_now())
            if "createdAt" not in data and "created_at" not in data:
                data["createdAt"] = now
            if "updatedAt" not in data and "updated_at" not in data:
                data["updatedAt"] = now
        return data

    @classmethod
    def field_aliases(cls) -> List[str]:
        return [field.alias or name for name, field in cls.model_fields.items()]

    # --- Persistence -----------------------------------------------------

    def validate_for_persistence(self) -> List[str]:
        """Return every rule violation; an empty list means the record may be written."""
        errors = []

        if not self.user_name or len(self.user_name.strip()) < 2:
            errors.append("User name must be at least 2 characters long")

        if not self.user_email or not EMAIL_PATTERN.match(self.user_email):
            errors.append("Valid email is required")

        if not self.user_phone or len(self.user_phone.strip()) < 10:
            errors.append("Valid phone number is required")

        if self.role not in VALID_ROLES:
            errors.append("Invalid role specified")

        if self.plan not in VALID_PLANS:
            errors.append("Invalid plan specified")

        if self.status not in VALID_STATUSES:
            errors.append("Invalid status specified")

        return errors

    def to_storage(self) -> Dict[str, Any]:
        """Document body for the store. Stamps ``updatedAt``; does not write anything."""
        data = self.model_dump(by_alias=True)
        for field in STORAGE_TIMESTAMP_FIELDS:
            value = data.get(field)
            if isinstance(value, str) and value:
                try:
                    data[field] = parse_timestamp(value)
                except ValueError:
                    # Not date-like; stored as given
                    pass
        data["updatedAt"] = to_iso(utc_now())
        return data

    @classmethod
    def from_storage(cls, doc_id: str, data: Dict[str, Any]) -> "UserRecord":
        """Build a record from a stored document; the document id wins over any body ``userId``."""
        return cls.model_validate({**data, "userId": doc_id})

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    def merge(self, updates: Dict[str, Any], allowed: Optional[Iterable[str]] = None) -> "UserRecord":
        """
        Return a new record with ``updates`` applied over this one.

        Keys must be the camelCase field names. Unknown keys and ``userId``
        are dropped; when ``allowed`` is given, only those keys are applied.
        """
        known = set(self.field_aliases())
        known.discard("userId")
        if allowed is not None:
            known &= set(allowed)

        data = self.model_dump(by_alias=True)
        for key, value in updates.items():
            if key in known:
                data[key] = value
        return type(self).model_validate(data)

    # --- Subscription lifecycle -----------------------------------------

    def activate_subscription(self, subscription_type: Optional[str], duration: Optional[str], now: Optional[datetime] = None) -> None:
        now = now or utc_now()
        self.subscription_status = SubscriptionStatus.ACTIVE.value
        self.subscription_type = subscription_type
        self.subscription_start_date = to_iso(now)
        self.subscription_end_date = to_iso(_advance(now, duration))
        self.updated_at = to_iso(utc_now())

    def cancel_subscription(self) -> None:
        self.subscription_status = SubscriptionStatus.CANCELLED.value
        self.auto_renewal = False
        self.updated_at = to_iso(utc_now())

    def extend_subscription(self, duration: Optional[str]) -> None:
        """
        Push the end date forward by ``duration``. No-op without an end date.

        Raises:
            ValueError: The stored end date is not a timestamp
        """
        if not self.subscription_end_date:
            return
        current_end = parse_timestamp(self.subscription_end_date)
        self.subscription_end_date = to_iso(_advance(current_end, duration))
        self.updated_at = to_iso(utc_now())

    def is_subscription_active(self, now: Optional[datetime] = None) -> bool:
        """Derived check; the stored status may still say active after the end date passes."""
        if self.subscription_status != SubscriptionStatus.ACTIVE.value:
            return False
        if not self.subscription_end_date:
            return False
        try:
            end = parse_timestamp(self.subscription_end_date)
        except ValueError:
            return False
        return (now or utc_now()) < end
