"""
Explicit per-entity validation.

Each ``validate_*`` function inspects an ORM instance about to be written and
returns a ``ValidationResult``; services call ``raise_for_errors()`` on it
before every commit.
"""

import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from lessonbook.core.exceptions import ValidationError
from lessonbook.models import (
    PLAN_DURATIONS,
    Booking,
    BookingStatus,
    Lesson,
    LessonRequest,
    LessonRequestStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    Subscription,
    SubscriptionStatus,
    SubscriptionType,
    User,
    UserRole,
)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


@dataclass
class FieldError:
    field: str
    message: str


@dataclass
class ValidationResult:
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str):
        self.errors.append(FieldError(field_name, message))

    def require(self, field_name: str, value, message: str = None):
        if value is None or (isinstance(value, str) and not value.strip()):
            self.add(field_name, message or f"{field_name} is required")
            return False
        return True

    def require_member(self, field_name: str, value, enum_cls):
        if not self.require(field_name, value):
            return
        try:
            enum_cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            self.add(field_name, f"{field_name} must be one of: {allowed}")

    def raise_for_errors(self):
        if self.errors:
            raise ValidationError("; ".join(e.message for e in self.errors))


def _non_negative_number(result: ValidationResult, field_name: str, value, label: str):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        result.add(field_name, f"{label} must be a number")
    elif value < 0:
        result.add(field_name, f"{label} must be positive")


def validate_user(user: User, plain_password: str = None) -> ValidationResult:
    result = ValidationResult()
    result.require("name", user.name, "Please provide a name")
    if result.require("email", user.email, "Please provide an email"):
        if not EMAIL_RE.match(user.email):
            result.add("email", "Please provide a valid email")
        elif user.email != user.email.strip().lower():
            result.add("email", "Email must be stored lowercased")
    if plain_password is not None and len(plain_password) < MIN_PASSWORD_LENGTH:
        result.add("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    result.require("password", user.password, "Please provide a password")
    result.require_member("role", user.role, UserRole)
    return result


def validate_lesson(lesson: Lesson) -> ValidationResult:
    result = ValidationResult()
    result.require("title", lesson.title, "Title is required")
    result.require("description", lesson.description, "Description is required")
    _non_negative_number(result, "price", lesson.price, "Price")
    for field_name, label in (("level", "Level"), ("category", "Category")):
        value = getattr(lesson, field_name)
        if value is not None and (not isinstance(value, str) or not value.strip()):
            result.add(field_name, f"{label} cannot be empty")
    if lesson.duration is not None and (not isinstance(lesson.duration, int) or lesson.duration <= 0):
        result.add("duration", "Duration must be a positive number of minutes")
    return result


def validate_subscription(subscription: Subscription) -> ValidationResult:
    result = ValidationResult()
    result.require("userId", subscription.user_id)
    result.require_member("type", subscription.type, SubscriptionType)
    result.require_member("status", subscription.status, SubscriptionStatus)
    _non_negative_number(result, "price", subscription.price, "Price")
    if result.require("startDate", subscription.start_date) and result.require("endDate", subscription.end_date):
        if result.ok:
            days = PLAN_DURATIONS[SubscriptionType(subscription.type)]
            if subscription.end_date - subscription.start_date != timedelta(days=days):
                result.add("endDate", f"End date must be {days} days after start date")
    return result


def validate_booking(booking: Booking) -> ValidationResult:
    result = ValidationResult()
    result.require("userId", booking.user_id)
    result.require("subscriptionId", booking.subscription_id)
    result.require("classDate", booking.class_date)
    result.require("classTime", booking.class_time)
    result.require_member("status", booking.status, BookingStatus)
    return result


def validate_lesson_request(request: LessonRequest) -> ValidationResult:
    result = ValidationResult()
    result.require("userId", request.user_id)
    result.require("lessonId", request.lesson_id)
    result.require("requestedDate", request.requested_date)
    result.require("requestedTime", request.requested_time)
    result.require_member("status", request.status, LessonRequestStatus)
    return result


def validate_payment(payment: Payment) -> ValidationResult:
    result = ValidationResult()
    result.require("userId", payment.user_id)
    result.require("transactionId", payment.transaction_id)
    result.require_member("type", payment.type, PaymentType)
    result.require_member("paymentMethod", payment.payment_method, PaymentMethod)
    result.require_member("status", payment.status, PaymentStatus)
    _non_negative_number(result, "amount", payment.amount, "Amount")

    has_lesson = payment.lesson_id is not None
    has_subscription = payment.subscription_id is not None
    if has_lesson == has_subscription:
        result.add("target", "Payment must reference exactly one of lesson or subscription")
    elif payment.type == PaymentType.LESSON and not has_lesson:
        result.add("lessonId", "Lesson payment must reference a lesson")
    elif payment.type == PaymentType.SUBSCRIPTION and not has_subscription:
        result.add("subscriptionId", "Subscription payment must reference a subscription")
    return result
