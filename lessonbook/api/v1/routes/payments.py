from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from pydantic import Field
from sqlalchemy.orm import Session

from lessonbook.api.v1.schemas import CamelModel
from lessonbook.api.v1.serializers import payment_to_dict
from lessonbook.core.config import settings
from lessonbook.core.database import get_db
from lessonbook.core.exceptions import PaymentIncomplete, ServerError, ValidationError
from lessonbook.core.middleware import get_current_user
from lessonbook.models.payment import PaymentMethod
from lessonbook.models.user import User
from lessonbook.payments.paypal_client import PayPalProcessor
from lessonbook.payments.stripe_client import StripeProcessor
from lessonbook.payments.types import from_minor_units, parse_target
from lessonbook.services.payment_service import PaymentService, decode_custom, encode_custom
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


def get_payment_service() -> PaymentService:
    """Dependency to get payment service instance"""
    return PaymentService()


def get_card_processor(request: Request) -> StripeProcessor:
    """Dependency returning the card processor built at startup"""
    return request.app.state.card_processor


def get_wallet_processor(request: Request) -> PayPalProcessor:
    """Dependency returning the wallet processor built at startup"""
    return request.app.state.wallet_processor


class CreatePaymentRequest(CamelModel):
    type: Optional[str] = None
    item_id: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)


class ConfirmCardRequest(CamelModel):
    payment_intent_id: str
    type: Optional[str] = None
    item_id: Optional[str] = None


def _callback_url(request: Request, path: str) -> str:
    base = settings.public_base_url or str(request.base_url)
    return f"{base.rstrip('/')}{settings.api_prefix}/payments/{path}"


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.post("/create-intent")
async def create_intent(
    request: CreatePaymentRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    processor: StripeProcessor = Depends(get_card_processor),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """
    Open a Stripe PaymentIntent for the item.
    Returns the client secret the browser confirms the card with.
    """
    logger.info(f"create_intent: Entry - user: {current_user.id}, type: {request.type}")

    if not request.amount:
        raise ValidationError("Missing required fields")
    target = parse_target(request.type, request.item_id)
    payment_service.check_target(db, target)

    result = await processor.create_intent(
        request.amount,
        metadata={
            "userId": current_user.id,
            "type": target.payment_type.value,
            "itemId": target.item_id,
        },
    )
    if not result.ok:
        raise ServerError(f"Payment processor error: {result.error}")

    logger.info(f"create_intent: Success - user: {current_user.id}, intent: {result.value.id}")
    return {"clientSecret": result.value.client_secret}


@router.post("/confirm-stripe")
async def confirm_stripe(
    request: ConfirmCardRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    processor: StripeProcessor = Depends(get_card_processor),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """
    Re-check the intent with Stripe, then grant the purchase and record it.
    The purchase comes from the intent metadata; the caller must be the user
    who opened the intent and the body must name the same item.
    Safe to retry: the same intent never grants twice.
    """
    logger.info(f"confirm_stripe: Entry - user: {current_user.id}, intent: {request.payment_intent_id}")

    requested = parse_target(request.type, request.item_id)

    result = await processor.retrieve_intent(request.payment_intent_id)
    if not result.ok:
        raise ServerError(f"Payment processor error: {result.error}")

    intent = result.value
    target = payment_service.card_intent_target(intent, current_user.id, requested=requested)
    if not intent.succeeded:
        logger.warning(f"confirm_stripe: Not succeeded - intent: {intent.id}, status: {intent.status}")
        raise PaymentIncomplete()

    try:
        payment = payment_service.complete_purchase(
            db,
            user_id=current_user.id,
            target=target,
            amount=from_minor_units(intent.amount),
            method=PaymentMethod.STRIPE,
            transaction_id=intent.id,
        )
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"confirm_stripe: Failure - {e}")
        raise ServerError()

    return {"message": "Payment successful", "payment": payment_to_dict(payment)}


@router.post("/create-paypal")
async def create_paypal(
    request: CreatePaymentRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    processor: PayPalProcessor = Depends(get_wallet_processor),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """
    Register a PayPal payment and hand back the approval URL.
    The browser follows it and PayPal redirects to /paypal-success.
    """
    logger.info(f"create_paypal: Entry - user: {current_user.id}, type: {request.type}")

    if not request.amount:
        raise ValidationError("Missing required fields")
    target = parse_target(request.type, request.item_id)
    payment_service.check_target(db, target)

    result = await processor.create_payment(
        amount=request.amount,
        item_name=target.label,
        sku=target.item_id,
        description=f"{target.label} Purchase",
        custom=encode_custom(current_user.id, target),
        return_url=_callback_url(http_request, "paypal-success"),
        cancel_url=_callback_url(http_request, "paypal-cancel"),
    )
    if not result.ok:
        raise ServerError("PayPal payment creation failed")

    logger.info(f"create_paypal: Success - user: {current_user.id}, payment: {result.value.id}")
    return {"approvalUrl": result.value.approval_url, "paymentId": result.value.id}


@router.get("/paypal-success")
async def paypal_success(
    payment_id: Optional[str] = Query(None, alias="paymentId"),
    payer_id: Optional[str] = Query(None, alias="PayerID"),
    db: Session = Depends(get_db),
    processor: PayPalProcessor = Depends(get_wallet_processor),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """
    PayPal return URL. Executes the payment and, when approved, grants and
    records it for the user carried in the custom payload. Always answers
    with a browser redirect.
    """
    logger.info(f"paypal_success: Entry - payment: {payment_id}")

    if not payment_id or not payer_id:
        return _redirect(settings.payment_failed_redirect)

    result = await processor.execute_payment(payment_id, payer_id)
    if not result.ok or not result.value.approved:
        logger.warning(f"paypal_success: Not approved - payment: {payment_id}")
        return _redirect(settings.payment_failed_redirect)

    wallet_payment = result.value
    try:
        user_id, target = decode_custom(wallet_payment.custom)
        payment_service.complete_purchase(
            db,
            user_id=user_id,
            target=target,
            amount=wallet_payment.total or 0.0,
            method=PaymentMethod.PAYPAL,
            transaction_id=wallet_payment.id,
        )
    except Exception as e:
        db.rollback()
        logger.error(f"paypal_success: Failure - {e}")
        return _redirect(settings.payment_failed_redirect)

    logger.info(f"paypal_success: Success - payment: {payment_id}")
    return _redirect(settings.payment_success_redirect)


@router.get("/paypal-cancel")
async def paypal_cancel():
    return _redirect(settings.payment_cancelled_redirect)


@router.get("/history")
async def get_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    payment_service: PaymentService = Depends(get_payment_service)
):
    """Caller's payments, newest first, with lesson/subscription populated."""
    try:
        payments = payment_service.history(db, current_user.id)
        return [payment_to_dict(p, populate=True) for p in payments]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_history: Failure - {e}")
        raise ServerError()
