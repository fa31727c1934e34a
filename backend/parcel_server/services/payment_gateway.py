"""
Parcel Server — Payment Gateway (Stripe)
=========================================

What:  Creates server-side payment intents and hands back the client secret
       the browser needs to confirm the card payment.
How:   Async Stripe SDK call (`PaymentIntent.create_async`) with the secret
       key passed per request, so no module-level Stripe state is mutated.
Who:   Constructed once in the lifespan (`app.state.payment_gateway`);
       injected into routes via `Depends(get_payment_gateway)`.

The amount is not checked against any parcel; the client decides what to
charge. Intent creation is not retried.
"""

import logging
import time
from typing import Optional

import stripe
from fastapi import Request
from stripe import StripeError

from parcel_server.exceptions import PaymentProviderError

logger = logging.getLogger(__name__)


class PaymentGateway:
    """
    Thin wrapper over the Stripe PaymentIntent API.

    Error Handling:
        Any StripeError (card, auth, rate limit, network) is logged with the
        Stripe error code and re-raised as PaymentProviderError (500).
    """

    PAYMENT_METHOD_TYPES = ["card"]

    def __init__(self, api_key: str, currency: str = "usd"):
        self.api_key = api_key
        self.currency = currency

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def create_payment_intent(self, amount_in_cents: int) -> str:
        """
        Create a PaymentIntent for `amount_in_cents` and return its client secret.

        Raises:
            PaymentProviderError: key missing, or Stripe rejected the request.
        """
        if not self.configured:
            raise PaymentProviderError(
                message="Payments are not available right now.",
                context={"reason": "PAYMENT_GATEWAY_KEY not configured"},
            )

        start_time = time.perf_counter()
        try:
            intent = await stripe.PaymentIntent.create_async(
                api_key=self.api_key,
                amount=amount_in_cents,
                currency=self.currency,
                payment_method_types=self.PAYMENT_METHOD_TYPES,
            )
        except StripeError as e:
            logger.error(
                "Stripe PaymentIntent creation failed: %s (code=%s, status=%s)",
                e.user_message or str(e),
                e.code,
                e.http_status,
            )
            raise PaymentProviderError(
                context={"provider": "stripe", "code": e.code, "http_status": e.http_status},
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "PaymentIntent %s created for %d %s in %.0fms",
            intent.id,
            amount_in_cents,
            self.currency,
            duration_ms,
        )
        return intent.client_secret


# ── Gateway Dependency ────────────────────────────────────────────────────
def get_payment_gateway(request: Request) -> PaymentGateway:
    gateway: Optional[PaymentGateway] = getattr(request.app.state, "payment_gateway", None)
    if gateway is None:
        raise PaymentProviderError(
            message="Payments are not available right now.",
            context={"reason": "payment gateway not initialized"},
        )
    return gateway
