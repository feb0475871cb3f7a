"""
iShop Payments Backend — Razorpay Gateway Client
==================================================

What:  Creates payment orders through the Razorpay Orders REST API.
How:   One long-lived httpx.AsyncClient with basic auth (key id / secret)
       posts {amount, currency, receipt} to /orders and returns the order
       JSON as-is.
Who:   Constructed once in the application lifespan and injected into
       PaymentService; closed on shutdown.

Amounts:
    The gateway takes integer minor units (paise). The major-unit amount is
    converted with Decimal arithmetic and half-up rounding before the call,
    so 499.99 becomes exactly 49999.

Failure model:
    Any non-2xx status, transport error, timeout or non-JSON body becomes a
    GatewayError carrying the gateway's error detail. There is no retry: a
    timed-out call may still have created the order upstream.
"""

import logging
import secrets
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

import httpx

from ishop.config import Settings
from ishop.exceptions import GatewayError, ValidationError

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, float, str]

# Paise per rupee
MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount_major_units: Amount) -> int:
    """
    Convert a major-unit amount to the gateway's integer minor units.

    Raises:
        ValidationError: amount is not a finite positive number, or rounds
            to zero minor units.
    """
    try:
        amount = Decimal(str(amount_major_units))
    except (InvalidOperation, ValueError):
        raise ValidationError(message="amount must be a number", field="amount")

    if not amount.is_finite() or amount <= 0:
        raise ValidationError(message="amount must be a positive number", field="amount")

    minor = int((amount * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if minor < 1:
        raise ValidationError(
            message="amount is smaller than the smallest currency unit",
            field="amount",
        )
    return minor


def new_receipt() -> str:
    """20 hex chars of randomness; a tracing handle, not a secret."""
    return secrets.token_hex(10)


class RazorpayClient:
    """
    Thin async wrapper around the gateway's order-creation endpoint.

    The secret is only used for the basic-auth header and is never logged.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        currency: str = "INR",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.currency = currency
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            auth=(key_id, key_secret),
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "RazorpayClient":
        return cls(
            key_id=settings.razorpay_key_id,
            key_secret=settings.razorpay_secret.get_secret_value(),
            base_url=settings.razorpay_api_url,
            currency=settings.payment_currency,
            timeout=settings.gateway_timeout,
        )

    async def create_order(self, amount_major_units: Amount) -> Dict[str, Any]:
        """
        Create an order upstream and return the gateway's order object.

        Raises:
            ValidationError: amount is not a positive number.
            GatewayError: the gateway call failed; `detail` holds its reason.
        """
        payload = {
            "amount": to_minor_units(amount_major_units),
            "currency": self.currency,
            "receipt": new_receipt(),
        }
        logger.info(
            "Creating gateway order: amount=%d %s receipt=%s",
            payload["amount"], payload["currency"], payload["receipt"],
        )

        try:
            response = await self._client.post("/orders", json=payload)
            response.raise_for_status()
            order = response.json()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.error(
                "Gateway rejected order (receipt=%s): HTTP %d %s",
                payload["receipt"], e.response.status_code, detail,
            )
            raise GatewayError(
                detail=detail,
                status_code=e.response.status_code,
                context={"receipt": payload["receipt"]},
            )
        except httpx.TimeoutException as e:
            logger.error("Gateway timeout creating order (receipt=%s): %s", payload["receipt"], e)
            raise GatewayError(
                detail={"description": "Payment gateway timed out"},
                context={"receipt": payload["receipt"]},
            )
        except httpx.RequestError as e:
            logger.error("Gateway network error (receipt=%s): %s", payload["receipt"], e)
            raise GatewayError(
                detail={"description": f"Could not reach payment gateway: {type(e).__name__}"},
                context={"receipt": payload["receipt"]},
            )
        except ValueError:
            # response.json() on a non-JSON 2xx body
            logger.error("Gateway returned a non-JSON body (receipt=%s)", payload["receipt"])
            raise GatewayError(
                detail={"description": "Payment gateway returned an unreadable response"},
                status_code=response.status_code,
                context={"receipt": payload["receipt"]},
            )

        if not isinstance(order, dict) or "id" not in order:
            raise GatewayError(
                detail={"description": "Payment gateway response has no order id"},
                status_code=response.status_code,
                context={"receipt": payload["receipt"]},
            )

        logger.info("Gateway order created: %s (receipt=%s)", order["id"], payload["receipt"])
        return order

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_detail(response: httpx.Response) -> Any:
    """The gateway's `error` object if the body has one, else a text excerpt."""
    try:
        body = response.json()
    except ValueError:
        return {"description": response.text[:200]}
    if isinstance(body, dict) and "error" in body:
        return body["error"]
    return body
