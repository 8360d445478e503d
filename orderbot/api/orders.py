"""Order validation and submission endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from orderbot.api.menu import menu_error_to_http
from orderbot.core.dependencies import (
    get_menu_repository,
    get_submission_client,
    get_validator,
)
from orderbot.services.menu.base import Menu, MenuFetchError
from orderbot.services.menu.repository import MenuRepository
from orderbot.services.ordering.models import Order, OrderStatus, ValidationResult, utc_now
from orderbot.services.ordering.submission import (
    OrderSubmissionClient,
    SubmissionConfirmation,
)
from orderbot.services.ordering.validator import OrderValidator

router = APIRouter()
logger = logging.getLogger(__name__)


class SubmitOrderResponse(BaseModel):
    """A submitted order and the fulfillment confirmation."""
    order: Order
    confirmation: Optional[SubmissionConfirmation] = None


async def _load_menu(menu_repository: MenuRepository) -> Menu:
    try:
        return await menu_repository.get_menu()
    except MenuFetchError as e:
        logger.error(f"[ORDERS] Menu unavailable - {e.code}: {e.message}")
        raise menu_error_to_http(e)


@router.post("/api/orders/validate", response_model=ValidationResult)
async def validate_order(
    order: Order,
    menu_repository: MenuRepository = Depends(get_menu_repository),
    validator: OrderValidator = Depends(get_validator),
):
    """Validate and reprice an order against the current menu."""
    if not order.has_items():
        raise HTTPException(status_code=400, detail="Order has no items")

    menu = await _load_menu(menu_repository)
    result = validator.validate(order, menu)
    logger.info(
        f"[ORDERS] Validated order {order.id} - valid: {result.is_valid}, "
        f"{len(result.errors)} errors"
    )
    return result


@router.post("/api/orders", response_model=SubmitOrderResponse)
async def submit_order(
    order: Order,
    menu_repository: MenuRepository = Depends(get_menu_repository),
    validator: OrderValidator = Depends(get_validator),
    submission_client: OrderSubmissionClient = Depends(get_submission_client),
):
    """Validate an order server-side, then submit it for fulfillment."""
    if not order.has_items():
        raise HTTPException(status_code=400, detail="Order has no items")

    # Only pending -> confirmed is ours to make; later statuses never go back
    if order.status != OrderStatus.PENDING:
        logger.warning(
            f"[ORDERS] Rejected order {order.id} - status is {order.status}, not pending"
        )
        return JSONResponse(
            status_code=409,
            content={
                "error": f"Order is already {order.status} and cannot be submitted.",
                "code": "order_not_pending",
            },
        )

    menu = await _load_menu(menu_repository)
    result = validator.validate(order, menu)
    if not result.is_valid:
        logger.warning(
            f"[ORDERS] Rejected order {order.id} - "
            f"{[str(e.kind) for e in result.errors]}"
        )
        return JSONResponse(
            status_code=400,
            content={
                "error": "Order failed validation",
                "errors": [e.model_dump(mode="json") for e in result.errors],
            },
        )

    validated = result.validated_order
    submission = await submission_client.submit(validated)
    if not submission.success:
        logger.error(
            f"[ORDERS] Submission failed for order {order.id} - {submission.error.code}"
        )
        return JSONResponse(
            status_code=502,
            content={
                "error": submission.error.message,
                "code": submission.error.code,
                "details": submission.error.details,
            },
        )

    confirmed = validated.model_copy(
        update={"status": OrderStatus.CONFIRMED, "updated_at": utc_now()}
    )
    logger.info(
        f"[ORDERS] Order {order.id} submitted - confirmation "
        f"{submission.data.confirmation_id}"
    )
    return SubmitOrderResponse(order=confirmed, confirmation=submission.data)
