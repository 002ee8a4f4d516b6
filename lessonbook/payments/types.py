"""Value types shared by the payment processors and the payment service."""

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar, Union

from lessonbook.core.exceptions import ValidationError
from lessonbook.models.payment import PaymentType
from lessonbook.models.subscription import SubscriptionType

T = TypeVar("T")


@dataclass(frozen=True)
class LessonPurchase:
    lesson_id: str

    payment_type = PaymentType.LESSON

    @property
    def item_id(self) -> str:
        return self.lesson_id

    @property
    def label(self) -> str:
        return "English Lesson"


@dataclass(frozen=True)
class SubscriptionPurchase:
    plan: SubscriptionType

    payment_type = PaymentType.SUBSCRIPTION

    @property
    def item_id(self) -> str:
        return self.plan.value

    @property
    def label(self) -> str:
        return "Speaking Class Subscription"


PurchaseTarget = Union[LessonPurchase, SubscriptionPurchase]


def parse_target(payment_type, item_id) -> PurchaseTarget:
    """Build the purchase target from the wire pair (type, itemId)."""
    if not payment_type or not item_id:
        raise ValidationError("Missing required fields")
    try:
        kind = PaymentType(payment_type)
    except ValueError:
        raise ValidationError(f"Unknown payment type: {payment_type}")

    if kind == PaymentType.LESSON:
        return LessonPurchase(lesson_id=str(item_id))
    try:
        return SubscriptionPurchase(plan=SubscriptionType(item_id))
    except ValueError:
        raise ValidationError(f"Unknown subscription type: {item_id}")


@dataclass
class ProcessorResult(Generic[T]):
    """Outcome of a processor call: ``value`` when ok, ``error`` otherwise."""
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: T) -> "ProcessorResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "ProcessorResult[T]":
        return cls(ok=False, error=error)


@dataclass
class CardIntent:
    id: str
    status: str
    amount: int  # minor currency units
    client_secret: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@dataclass
class WalletPayment:
    id: str
    state: str
    approval_url: Optional[str] = None
    custom: Optional[str] = None
    total: Optional[float] = None

    @property
    def approved(self) -> bool:
        return self.state == "approved"


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


def from_minor_units(amount: int) -> float:
    return amount / 100
