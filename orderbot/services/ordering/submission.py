"""Submission of confirmed orders to the external fulfillment system."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from pydantic import BaseModel

from orderbot.services.ordering.models import Order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff, without jitter."""

    max_retries: int = 3
    initial_delay: float = 1.0
    backoff_factor: float = 2.0

    @staticmethod
    def is_transient(status_code: int) -> bool:
        """Server errors and rate limiting are worth retrying."""
        return status_code >= 500 or status_code == 429


class SubmissionConfirmation(BaseModel):
    """Success payload returned by the fulfillment system."""

    confirmation_id: str
    status: str = "received"
    estimated_wait_minutes: Optional[int] = None


class SubmissionFailure(BaseModel):
    """Structured failure carrying the upstream code, message and detail."""

    code: str
    message: str
    details: Optional[Any] = None


class SubmissionResult(BaseModel):
    """Either a confirmation or a failure, never both."""

    success: bool
    data: Optional[SubmissionConfirmation] = None
    error: Optional[SubmissionFailure] = None

    @classmethod
    def ok(cls, confirmation: SubmissionConfirmation) -> "SubmissionResult":
        return cls(success=True, data=confirmation)

    @classmethod
    def fail(
        cls, code: str, message: str, details: Optional[Any] = None
    ) -> "SubmissionResult":
        return cls(
            success=False,
            error=SubmissionFailure(code=code, message=message, details=details),
        )


def build_form(order: Order) -> Dict[str, str]:
    """Form fields the fulfillment endpoint expects for each line."""
    form: Dict[str, str] = {}
    for index, item in enumerate(order.items):
        form[f"items[{index}][id]"] = str(item.menu_item_id)
        form[f"items[{index}][quantity]"] = str(item.quantity)
    return form


def parse_wait_minutes(raw: Any, order_id: str = "") -> Optional[int]:
    """
    Read the optional wait estimate from a fulfillment response.

    Whole numbers, integral floats and digit strings are accepted; anything
    else is dropped, since the order has already been accepted upstream.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    logger.warning(
        f"[SUBMISSION] Ignoring unparseable wait estimate {raw!r} for order {order_id}"
    )
    return None


class OrderSubmissionClient:
    """
    Submits validated orders, retrying transient failures.

    5xx and 429 responses and transport errors are retried up to
    ``retry_policy.max_retries`` times; anything else is returned at once
    as a failure. The order is assumed to have passed validation already.
    """

    def __init__(
        self,
        submission_url: Optional[str],
        api_key: Optional[str] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.submission_url = submission_url
        self.api_key = api_key
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout = timeout
        self.transport = transport
        self._sleep = sleep

    async def submit(self, order: Order) -> SubmissionResult:
        """Submit ``order`` and return the final outcome."""
        if not self.submission_url:
            return SubmissionResult.fail(
                "config_error", "Order submission URL is not configured."
            )

        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        form = build_form(order)

        policy = self.retry_policy
        attempt = 0
        delay = policy.initial_delay

        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport
        ) as client:
            while True:
                try:
                    response = await client.post(
                        self.submission_url,
                        params={"origin": "API"},
                        data=form,
                        headers=headers,
                    )
                except httpx.TransportError as e:
                    if attempt < policy.max_retries:
                        logger.warning(
                            f"[SUBMISSION] Network error submitting order {order.id}: "
                            f"{type(e).__name__}. Retrying in {delay}s "
                            f"(retry {attempt + 1}/{policy.max_retries})"
                        )
                        await self._sleep(delay)
                        attempt += 1
                        delay *= policy.backoff_factor
                        continue
                    logger.error(
                        f"[SUBMISSION] Giving up on order {order.id} after "
                        f"{attempt + 1} attempts: {type(e).__name__}: {e}"
                    )
                    return SubmissionResult.fail(
                        "network_error",
                        str(e) or "Unknown network error occurred",
                    )
                except httpx.HTTPError as e:
                    logger.error(
                        f"[SUBMISSION] Request for order {order.id} failed: "
                        f"{type(e).__name__}: {e}"
                    )
                    return SubmissionResult.fail("network_error", str(e))

                status = response.status_code
                if not response.is_success:
                    if policy.is_transient(status) and attempt < policy.max_retries:
                        logger.warning(
                            f"[SUBMISSION] Transient error {status} submitting order "
                            f"{order.id}. Retrying in {delay}s "
                            f"(retry {attempt + 1}/{policy.max_retries})"
                        )
                        await self._sleep(delay)
                        attempt += 1
                        delay *= policy.backoff_factor
                        continue
                    return self._failure_from_response(order, response)

                return self._result_from_success(order, response)

    def _failure_from_response(
        self, order: Order, response: httpx.Response
    ) -> SubmissionResult:
        status = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = {"message": response.reason_phrase}
        message = None
        if isinstance(body, dict):
            message = body.get("message")
        logger.error(f"[SUBMISSION] Order {order.id} rejected with status {status}")
        return SubmissionResult.fail(
            f"http_{status}",
            message or f"External API returned status {status}",
            details=body,
        )

    def _result_from_success(
        self, order: Order, response: httpx.Response
    ) -> SubmissionResult:
        try:
            data = response.json()
        except ValueError:
            data = None

        confirmation_id = data.get("confirmationId") if isinstance(data, dict) else None
        if not confirmation_id:
            logger.error(
                f"[SUBMISSION] Order {order.id} accepted without a confirmation ID"
            )
            return SubmissionResult.fail(
                "invalid_response",
                "External API did not return a confirmation ID.",
                details=data,
            )

        logger.info(
            f"[SUBMISSION] Order {order.id} submitted - confirmation {confirmation_id}"
        )
        return SubmissionResult.ok(
            SubmissionConfirmation(
                confirmation_id=str(confirmation_id),
                status="received",
                estimated_wait_minutes=parse_wait_minutes(
                    data.get("estimatedWaitTimeMinutes"), order.id
                ),
            )
        )
