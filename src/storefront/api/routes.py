"""FastAPI routes for the Storefront domain — orders and payments."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.auth import Caller, current_caller, fulfillment_service
from storefront.api.schemas import (
    CreateGatewayOrderRequest,
    GatewayConfigStatusResponse,
    GatewayOrderResponse,
    GatewayOrderSchema,
    OrderIdResponse,
    OrderListResponse,
    OrderResponse,
    PaidOrderSchema,
    PaymentResultSchema,
    PlaceOrderRequest,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from storefront.config import get_settings
from storefront.exceptions import NotFoundError
from storefront.gateway import get_gateway
from storefront.order.delivery import RecordDelivery, deliver_due_orders, delivery_countdown
from storefront.order.lookup import load_order
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.order.returns import ReturnOrder
from storefront.payment.gateway_order import CreateGatewayOrder
from storefront.payment.verification import verify_payment


def _order_response(order: Order) -> OrderResponse:
    settings = get_settings()
    address = order.shipping_address
    result = order.payment_result
    return OrderResponse(
        id=str(order.id),
        order_code=order.order_code,
        status=order.status,
        customer_id=str(order.customer_id),
        items=[
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "image": item.image,
            }
            for item in order.items
        ],
        shipping_address=(
            {
                "line1": address.line1,
                "line2": address.line2,
                "city": address.city,
                "state": address.state,
                "postal_code": address.postal_code,
                "country": address.country,
            }
            if address
            else None
        ),
        payment_method=order.payment_method,
        payment_result=(
            PaymentResultSchema(
                id=result.payment_id,
                order_id=result.gateway_order_id,
                status=result.status,
                update_time=result.update_time,
                email_address=result.email_address,
            )
            if result
            else None
        ),
        items_price=order.items_price,
        tax_price=order.tax_price,
        shipping_price=order.shipping_price,
        total_price=order.total_price,
        paid=bool(order.paid),
        paid_at=order.paid_at,
        delivered=bool(order.delivered),
        delivered_at=order.delivered_at,
        returned=bool(order.returned),
        returned_at=order.returned_at,
        created_at=order.created_at,
        delivery_countdown_seconds=(
            delivery_countdown(order, window_seconds=settings.delivery_window_seconds)
            if settings.simulate_delivery
            else None
        ),
    )


def _owned_order(order_id: str, caller: Caller) -> Order:
    order = load_order(order_id)
    if str(order.customer_id) != caller.user_id:
        raise NotFoundError("Order not found")
    return order


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest, caller: Caller = Depends(current_caller)) -> OrderIdResponse:
    """Submit a checkout; the order is stored unpaid with server-computed totals."""
    command = PlaceOrder(
        customer_id=caller.user_id,
        customer_email=caller.email,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method,
        order_code=body.order_code,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=order_id)


@order_router.get("/mine", response_model=OrderListResponse)
async def my_orders(caller: Caller = Depends(current_caller)) -> OrderListResponse:
    """List the caller's orders, newest first."""
    deliver_due_orders(customer_id=caller.user_id)
    orders = current_domain.repository_for(Order).find_for_customer(caller.user_id)
    return OrderListResponse(orders=[_order_response(order) for order in orders])


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, caller: Caller = Depends(current_caller)) -> OrderResponse:
    return _order_response(_owned_order(order_id, caller))


@order_router.put("/{order_id}/return", response_model=OrderResponse)
async def return_order(order_id: str, caller: Caller = Depends(current_caller)) -> OrderResponse:
    """Return a delivered order. Irreversible."""
    current_domain.process(ReturnOrder(order_id=order_id, customer_id=caller.user_id), asynchronous=False)
    return _order_response(load_order(order_id))


@order_router.post("/{order_id}/deliver", response_model=OrderResponse, dependencies=[Depends(fulfillment_service)])
async def record_delivery(order_id: str) -> OrderResponse:
    """Fulfillment callback: record that the order was delivered."""
    current_domain.process(RecordDelivery(order_id=order_id), asynchronous=False)
    return _order_response(load_order(order_id))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.get("/config-status", response_model=GatewayConfigStatusResponse)
def gateway_config_status() -> GatewayConfigStatusResponse:
    """Report whether gateway credentials are present, never their values."""
    gateway = get_gateway()
    return GatewayConfigStatusResponse(
        gateway=type(gateway).__name__,
        key_id="Found" if gateway.key_id else "Missing",
        key_secret="Found" if gateway.key_secret else "Missing",
    )


@payment_router.post("/create-order", response_model=GatewayOrderResponse)
def create_gateway_order(
    body: CreateGatewayOrderRequest,
    caller: Caller = Depends(current_caller),
) -> GatewayOrderResponse:
    """Open a hosted-checkout gateway order for a local order."""
    command = CreateGatewayOrder(
        amount=body.amount,
        order_ref=body.order_id,
        email_address=caller.email,
    )
    result = current_domain.process(command, asynchronous=False)
    return GatewayOrderResponse(
        order=GatewayOrderSchema(id=result["id"], amount=result["amount"], currency=result["currency"]),
        key=result["key"],
    )


@payment_router.post("/verify", response_model=VerifyPaymentResponse, response_model_by_alias=True)
def verify(body: VerifyPaymentRequest, caller: Caller = Depends(current_caller)) -> VerifyPaymentResponse:
    """Verify a hosted-checkout payment callback and mark the order paid."""
    summary = verify_payment(
        gateway_order_id=body.razorpay_order_id,
        gateway_payment_id=body.razorpay_payment_id,
        signature=body.razorpay_signature,
        order_ref=body.order_id,
        email_address=caller.email,
    )
    return VerifyPaymentResponse(order=PaidOrderSchema(**summary))
