from fastapi import APIRouter
from lessonbook.api.v1.routes import auth, lessons, bookings, subscriptions, lesson_requests, payments, admin

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(lessons.router, prefix="/lessons", tags=["lessons"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])
api_router.include_router(lesson_requests.router, prefix="/lesson-requests", tags=["lesson-requests"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
