"""JSON projections of ORM rows, camelCase on the wire."""

from lessonbook.core.clock import isoformat


def _enum_value(value):
    return value.value if hasattr(value, "value") else value


def public_user(user) -> dict:
    """User record without the password hash"""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": _enum_value(user.role),
        "purchasedLessons": [lesson.id for lesson in user.purchased_lessons],
        "subscriptions": [subscription.id for subscription in user.subscriptions],
        "createdAt": isoformat(user.created_at),
    }


def user_summary(user) -> dict:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def lesson_to_dict(lesson) -> dict:
    if lesson is None:
        return None
    return {
        "id": lesson.id,
        "title": lesson.title,
        "description": lesson.description,
        "price": lesson.price,
        "level": lesson.level,
        "category": lesson.category,
        "duration": lesson.duration,
        "createdAt": isoformat(lesson.created_at),
    }


def subscription_to_dict(subscription) -> dict:
    if subscription is None:
        return None
    return {
        "id": subscription.id,
        "userId": subscription.user_id,
        "type": _enum_value(subscription.type),
        "price": subscription.price,
        "status": _enum_value(subscription.status),
        "startDate": isoformat(subscription.start_date),
        "endDate": isoformat(subscription.end_date),
        "createdAt": isoformat(subscription.created_at),
    }


def booking_to_dict(booking, populate: bool = False) -> dict:
    data = {
        "id": booking.id,
        "userId": booking.user_id,
        "subscriptionId": booking.subscription_id,
        "classDate": isoformat(booking.class_date),
        "classTime": booking.class_time,
        "status": _enum_value(booking.status),
        "zoomLink": booking.zoom_link,
        "createdAt": isoformat(booking.created_at),
    }
    if populate:
        data["user"] = user_summary(booking.user)
        data["subscription"] = subscription_to_dict(booking.subscription)
    return data


def lesson_request_to_dict(request, populate: bool = True) -> dict:
    data = {
        "id": request.id,
        "userId": request.user_id,
        "lessonId": request.lesson_id,
        "requestedDate": isoformat(request.requested_date),
        "requestedTime": request.requested_time,
        "status": _enum_value(request.status),
        "message": request.message,
        "teacherResponse": request.teacher_response,
        "paymentId": request.payment_id,
        "createdAt": isoformat(request.created_at),
        "updatedAt": isoformat(request.updated_at),
    }
    if populate:
        data["user"] = user_summary(request.user)
        data["lesson"] = lesson_to_dict(request.lesson)
    return data


def payment_to_dict(payment, populate: bool = False, include_user: bool = False) -> dict:
    data = {
        "id": payment.id,
        "userId": payment.user_id,
        "type": _enum_value(payment.type),
        "amount": payment.amount,
        "paymentMethod": _enum_value(payment.payment_method),
        "transactionId": payment.transaction_id,
        "status": _enum_value(payment.status),
        "lessonId": payment.lesson_id,
        "subscriptionId": payment.subscription_id,
        "createdAt": isoformat(payment.created_at),
    }
    if populate:
        data["lesson"] = lesson_to_dict(payment.lesson)
        data["subscription"] = subscription_to_dict(payment.subscription)
    if include_user:
        data["user"] = user_summary(payment.user)
    return data
