"""
IntaSend inline checkout adapter.

``PaymentWidget`` mirrors the browser widget: it is built with the publishable
key and live flag, exposes the three result callbacks the widget fires, and
produces the attributes the checkout button needs. The same callbacks are
driven server-side from IntaSend's webhook so a payment is recorded even when
the browser tab is closed mid-checkout.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

COMPLETE = "COMPLETE"
FAILED = "FAILED"
IN_PROGRESS = "IN-PROGRESS"
PAYMENT_EVENTS = (COMPLETE, FAILED, IN_PROGRESS)

# Webhook ``state`` values and the widget event each one corresponds to
WEBHOOK_STATES = {
    "COMPLETE": COMPLETE,
    "FAILED": FAILED,
    "PENDING": IN_PROGRESS,
    "PROCESSING": IN_PROGRESS,
}


@dataclass
class PaymentResult:
    reference: str
    status: str
    amount: float = 0.0
    currency: Optional[str] = None
    phone_number: Optional[str] = None
    payment_method: Optional[str] = None
    user_id: Optional[str] = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_webhook(cls, payload: dict) -> "PaymentResult":
        try:
            amount = float(payload.get("value") or 0)
        except (TypeError, ValueError):
            amount = 0.0
        return cls(
            reference=str(payload.get("invoice_id") or ""),
            status=str(payload.get("state") or "").upper(),
            amount=amount,
            currency=payload.get("currency"),
            phone_number=payload.get("account"),
            payment_method=payload.get("provider"),
            user_id=payload.get("api_ref") or None,
            raw=payload,
        )


PaymentHandler = Callable[[PaymentResult], Any]


class PaymentWidget:
    def __init__(self, public_key: Optional[str], live: bool = False):
        self.public_key = public_key
        self.live = live
        self._handlers: dict[str, list[PaymentHandler]] = {event: [] for event in PAYMENT_EVENTS}

    def on(self, event: str, handler: PaymentHandler) -> "PaymentWidget":
        if event not in self._handlers:
            raise ValueError(f"Unknown payment event: {event}")
        self._handlers[event].append(handler)
        return self

    def on_complete(self, handler: PaymentHandler) -> "PaymentWidget":
        return self.on(COMPLETE, handler)

    def on_failed(self, handler: PaymentHandler) -> "PaymentWidget":
        return self.on(FAILED, handler)

    def on_progress(self, handler: PaymentHandler) -> "PaymentWidget":
        return self.on(IN_PROGRESS, handler)

    def dispatch(self, event: str, result: PaymentResult) -> list:
        if event not in self._handlers:
            raise ValueError(f"Unknown payment event: {event}")
        return [handler(result) for handler in self._handlers[event]]

    def handle_webhook(self, payload: dict) -> Optional[str]:
        """Dispatch a webhook body; returns the event fired, or None if the state is unknown"""
        result = PaymentResult.from_webhook(payload)
        event = WEBHOOK_STATES.get(result.status)
        if event is None:
            logger.warning(f"⚠️ Ignoring IntaSend webhook with state {result.status!r}")
            return None
        self.dispatch(event, result)
        return event

    def checkout_config(
        self,
        amount: float,
        currency: str,
        country: str,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        api_ref: Optional[str] = None,
    ) -> dict:
        """Widget init options plus the data attributes for the checkout button"""
        attributes = {
            "amount": amount,
            "currency": currency,
            "country": country,
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "api_ref": api_ref,
        }
        return {
            "publicAPIKey": self.public_key,
            "live": self.live,
            "attributes": {k: v for k, v in attributes.items() if v is not None},
        }
