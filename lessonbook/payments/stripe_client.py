import logging
from typing import Optional

import stripe
from starlette.concurrency import run_in_threadpool

from lessonbook.payments.types import CardIntent, ProcessorResult, to_minor_units

logger = logging.getLogger(__name__)


class StripeProcessor:
    """
    Card-network processor backed by Stripe PaymentIntents.

    The SDK is synchronous, so calls run in the threadpool. Processor-side
    failures come back as a failed ProcessorResult instead of raising.
    """

    def __init__(self, api_key: Optional[str], currency: str = "usd"):
        self.currency = currency
        self.client = stripe.StripeClient(api_key) if api_key else None
        self.logger = logging.getLogger(__name__)

    @property
    def configured(self) -> bool:
        return self.client is not None

    @staticmethod
    def _to_intent(intent) -> CardIntent:
        metadata = intent.metadata
        return CardIntent(
            id=intent.id,
            status=intent.status,
            amount=intent.amount,
            client_secret=intent.client_secret,
            metadata={key: metadata[key] for key in metadata.keys()} if metadata else {},
        )

    async def create_intent(self, amount: float, metadata: dict) -> ProcessorResult[CardIntent]:
        self.logger.info(f"create_intent: Entry - amount: {amount}")

        if not self.configured:
            return ProcessorResult.failure("Stripe is not configured")

        params = {
            "amount": to_minor_units(amount),
            "currency": self.currency,
            "metadata": metadata,
        }
        try:
            intent = await run_in_threadpool(self.client.payment_intents.create, params=params)
        except stripe.StripeError as e:
            self.logger.error(f"create_intent: Failure - {e}")
            return ProcessorResult.failure(str(e))

        self.logger.info(f"create_intent: Success - intent: {intent.id}")
        return ProcessorResult.success(self._to_intent(intent))

    async def retrieve_intent(self, intent_id: str) -> ProcessorResult[CardIntent]:
        self.logger.info(f"retrieve_intent: Entry - intent: {intent_id}")

        if not self.configured:
            return ProcessorResult.failure("Stripe is not configured")

        try:
            intent = await run_in_threadpool(self.client.payment_intents.retrieve, intent_id)
        except stripe.StripeError as e:
            self.logger.error(f"retrieve_intent: Failure - {e}")
            return ProcessorResult.failure(str(e))

        self.logger.info(f"retrieve_intent: Success - intent: {intent_id}, status: {intent.status}")
        return ProcessorResult.success(self._to_intent(intent))
