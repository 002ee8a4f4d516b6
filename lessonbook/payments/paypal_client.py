import logging
from typing import Optional

import httpx

from lessonbook.payments.types import ProcessorResult, WalletPayment

logger = logging.getLogger(__name__)

PAYPAL_API_URLS = {
    "sandbox": "https://api.sandbox.paypal.com",
    "live": "https://api.paypal.com",
}


class PayPalProcessor:
    """
    Redirect-based wallet processor over the PayPal REST payments API.

    Owns no HTTP client of its own; the app creates one at startup and
    closes it at shutdown.
    """

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        http: httpx.AsyncClient,
        mode: str = "sandbox",
        currency: str = "usd",
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.http = http
        self.base_url = PAYPAL_API_URLS.get(mode, PAYPAL_API_URLS["sandbox"])
        self.currency = currency.upper()
        self.logger = logging.getLogger(__name__)

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def _access_token(self) -> str:
        response = await self.http.post(
            f"{self.base_url}/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self.client_id, self.client_secret),
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()
        return response.json()["access_token"]

    async def _post(self, path: str, payload: dict) -> dict:
        token = await self._access_token()
        response = await self.http.post(
            f"{self.base_url}{path}",
            json=payload,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _to_payment(data: dict) -> WalletPayment:
        approval_url = next(
            (link["href"] for link in data.get("links", []) if link.get("rel") == "approval_url"),
            None,
        )
        transactions = data.get("transactions") or [{}]
        transaction = transactions[0]
        total = transaction.get("amount", {}).get("total")
        return WalletPayment(
            id=data["id"],
            state=data.get("state", ""),
            approval_url=approval_url,
            custom=transaction.get("custom"),
            total=float(total) if total is not None else None,
        )

    async def create_payment(
        self,
        amount: float,
        item_name: str,
        sku: str,
        description: str,
        custom: str,
        return_url: str,
        cancel_url: str,
    ) -> ProcessorResult[WalletPayment]:
        self.logger.info(f"create_payment: Entry - amount: {amount}, sku: {sku}")

        if not self.configured:
            return ProcessorResult.failure("PayPal is not configured")

        total = f"{amount:.2f}"
        payload = {
            "intent": "sale",
            "payer": {"payment_method": "paypal"},
            "redirect_urls": {"return_url": return_url, "cancel_url": cancel_url},
            "transactions": [{
                "item_list": {
                    "items": [{
                        "name": item_name,
                        "sku": sku,
                        "price": total,
                        "currency": self.currency,
                        "quantity": 1,
                    }]
                },
                "amount": {"currency": self.currency, "total": total},
                "description": description,
                "custom": custom,
            }],
        }
        try:
            data = await self._post("/v1/payments/payment", payload)
            payment = self._to_payment(data)
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            self.logger.error(f"create_payment: Failure - {e!r}")
            return ProcessorResult.failure(str(e))

        if not payment.approval_url:
            self.logger.error(f"create_payment: Failure - no approval url for {payment.id}")
            return ProcessorResult.failure("PayPal returned no approval URL")

        self.logger.info(f"create_payment: Success - payment: {payment.id}")
        return ProcessorResult.success(payment)

    async def execute_payment(self, payment_id: str, payer_id: str) -> ProcessorResult[WalletPayment]:
        self.logger.info(f"execute_payment: Entry - payment: {payment_id}")

        if not self.configured:
            return ProcessorResult.failure("PayPal is not configured")

        try:
            data = await self._post(
                f"/v1/payments/payment/{payment_id}/execute",
                {"payer_id": payer_id},
            )
            payment = self._to_payment(data)
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            self.logger.error(f"execute_payment: Failure - {e!r}")
            return ProcessorResult.failure(str(e))

        self.logger.info(f"execute_payment: Success - payment: {payment_id}, state: {payment.state}")
        return ProcessorResult.success(payment)
