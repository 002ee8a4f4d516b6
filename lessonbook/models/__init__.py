from lessonbook.models.user import User, UserRole, user_purchased_lessons
from lessonbook.models.lesson import Lesson
from lessonbook.models.subscription import Subscription, SubscriptionStatus, SubscriptionType, PLAN_DURATIONS
from lessonbook.models.booking import Booking, BookingStatus
from lessonbook.models.lesson_request import LessonRequest, LessonRequestStatus
from lessonbook.models.payment import Payment, PaymentMethod, PaymentStatus, PaymentType

__all__ = [
    "User", "UserRole", "user_purchased_lessons",
    "Lesson",
    "Subscription", "SubscriptionStatus", "SubscriptionType", "PLAN_DURATIONS",
    "Booking", "BookingStatus",
    "LessonRequest", "LessonRequestStatus",
    "Payment", "PaymentMethod", "PaymentStatus", "PaymentType",
]
