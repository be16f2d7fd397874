"""FastAPI endpoints for carts and orders.

A cart belongs to the bearer's user when one is authenticated, otherwise to
the anonymous session named by the ``X-Session-Id`` header.
"""

import json

from fastapi import APIRouter, Depends, Header, Request
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.identity.api.principal import current_user, optional_user, require_role
from storefront.identity.user.user import Role, User
from storefront.ordering.api.schemas import (
    AddressRequest,
    AddToCartRequest,
    AddTrackingRequest,
    ApplyDiscountRequest,
    CancelOrderRequest,
    MergeCartsRequest,
    PaymentFailureRequest,
    PlaceOrderRequest,
    RecordPaymentRequest,
    RefundOrderRequest,
    SetShippingRequest,
    SetTaxRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from storefront.ordering.cart.cart import Cart
from storefront.ordering.cart.discounts import ApplyDiscount, RemoveDiscount
from storefront.ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItemQuantity
from storefront.ordering.cart.management import (
    CreateCart,
    MergeCarts,
    SetShipping,
    SetShippingAddress,
    SetTax,
    ValidateCart,
)
from storefront.ordering.order.order import Order
from storefront.ordering.order.payment import RecordPayment, RecordPaymentFailure
from storefront.ordering.order.placement import PlaceOrder
from storefront.ordering.order.refund import RefundOrder
from storefront.ordering.order.status import AddTracking, CancelOrder, UpdateOrderStatus
from storefront.shared.api import AuthenticationFailed, PermissionDenied, envelope, paginated

cart_router = APIRouter(prefix="/carts", tags=["carts"])
order_router = APIRouter(prefix="/orders", tags=["orders"])


def cart_view(cart: Cart) -> dict:
    data = cart.to_dict()
    data["total_items"] = cart.total_items
    data["unique_items"] = cart.unique_items
    data["is_expired"] = cart.is_expired
    return data


def order_view(order: Order) -> dict:
    data = order.to_dict()
    data["total_items"] = order.total_items
    data["is_paid"] = order.is_paid
    data["can_be_cancelled"] = order.can_be_cancelled
    data["can_be_refunded"] = order.can_be_refunded
    return data


def cart_owner(
    user: User | None = Depends(optional_user),
    x_session_id: str | None = Header(default=None),
) -> dict:
    if user is not None:
        return {"user_id": str(user.id)}
    if x_session_id:
        return {"session_id": x_session_id}
    raise AuthenticationFailed("A signed-in user or an X-Session-Id header is required")


def _find_cart(owner: dict) -> Cart | None:
    repo = current_domain.repository_for(Cart)
    if "user_id" in owner:
        return repo.active_for_user(owner["user_id"])
    return repo.active_for_session(owner["session_id"])


def _cart_id(owner: dict) -> str:
    """The owner's active cart, opened on first use."""
    cart = _find_cart(owner)
    if cart is not None:
        return str(cart.id)
    return current_domain.process(CreateCart(**owner), asynchronous=False)


def _cart(cart_id) -> dict:
    return cart_view(current_domain.repository_for(Cart).get(cart_id))


# --- Cart endpoints ---


@cart_router.get("/current")
async def get_cart(owner: dict = Depends(cart_owner)) -> dict:
    return envelope(_cart(_cart_id(owner)))


@cart_router.post("/current/items", status_code=201)
async def add_item(body: AddToCartRequest, owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    variant = body.variant.model_dump(exclude_none=True) if body.variant else None
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        quantity=body.quantity,
        variant=json.dumps(variant) if variant else None,
    )
    current_domain.process(command, asynchronous=False)
    return envelope(_cart(cart_id), "Item added to cart")


@cart_router.put("/current/items/{item_id}")
async def update_item(item_id: str, body: UpdateCartItemRequest, owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    command = UpdateCartItemQuantity(cart_id=cart_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return envelope(_cart(cart_id), "Cart updated")


@cart_router.delete("/current/items/{item_id}")
async def remove_item(item_id: str, owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    current_domain.process(RemoveFromCart(cart_id=cart_id, item_id=item_id), asynchronous=False)
    return envelope(_cart(cart_id), "Item removed from cart")


@cart_router.delete("/current/items")
async def clear_cart(owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return envelope(_cart(cart_id), "Cart cleared")


@cart_router.post("/current/discount")
async def apply_discount(body: ApplyDiscountRequest, owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    command = ApplyDiscount(cart_id=cart_id, code=body.code, amount=body.amount, type=body.type)
    current_domain.process(command, asynchronous=False)
    return envelope(_cart(cart_id), "Discount applied")


@cart_router.delete("/current/discount")
async def remove_discount(owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    current_domain.process(RemoveDiscount(cart_id=cart_id), asynchronous=False)
    return envelope(_cart(cart_id), "Discount removed")


@cart_router.put("/current/shipping")
async def set_shipping(body: SetShippingRequest, owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    current_domain.process(SetShipping(cart_id=cart_id, cost=body.cost, method=body.method), asynchronous=False)
    return envelope(_cart(cart_id), "Shipping updated")


@cart_router.put("/current/shipping-address")
async def set_shipping_address(body: AddressRequest, owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    command = SetShippingAddress(cart_id=cart_id, address=json.dumps(body.model_dump(exclude_none=True)))
    current_domain.process(command, asynchronous=False)
    return envelope(_cart(cart_id), "Shipping address updated")


@cart_router.put("/current/tax")
async def set_tax(body: SetTaxRequest, owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    current_domain.process(SetTax(cart_id=cart_id, amount=body.amount), asynchronous=False)
    return envelope(_cart(cart_id), "Tax updated")


@cart_router.post("/current/validate")
async def validate_cart(owner: dict = Depends(cart_owner)) -> dict:
    cart_id = _cart_id(owner)
    unavailable = current_domain.process(ValidateCart(cart_id=cart_id), asynchronous=False)
    return envelope({"cart": _cart(cart_id), "unavailable_items": unavailable})


@cart_router.post("/merge")
async def merge_carts(body: MergeCartsRequest, user: User = Depends(current_user)) -> dict:
    cart_id = current_domain.process(MergeCarts(session_id=body.session_id, user_id=user.id), asynchronous=False)
    return envelope(_cart(cart_id) if cart_id else None, "Carts merged")


# --- Order endpoints ---


def _order_for(order_id: str, user: User) -> Order:
    order = current_domain.repository_for(Order).get(order_id)
    if str(order.user_id) != str(user.id) and user.role != Role.ADMIN.value:
        raise PermissionDenied("Not authorized to access this order")
    return order


@order_router.post("", status_code=201)
async def place_order(request: Request, body: PlaceOrderRequest, user: User = Depends(current_user)) -> dict:
    cart = current_domain.repository_for(Cart).active_for_user(user.id)
    if cart is None:
        raise ValidationError({"cart": ["No active cart to check out"]})

    command = PlaceOrder(
        cart_id=cart.id,
        payment_method=body.payment_method,
        shipping_address=json.dumps(body.shipping_address.model_dump(exclude_none=True)),
        billing_address=json.dumps(body.billing_address.model_dump(exclude_none=True))
        if body.billing_address
        else None,
        shipping_method=body.shipping_method,
        customer_note=body.customer_note,
        source=body.source,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    order_id = current_domain.process(command, asynchronous=False)
    return envelope(order_view(current_domain.repository_for(Order).get(order_id)), "Order placed")


@order_router.get("/mine")
async def my_orders(page: int = 1, limit: int | None = None, user: User = Depends(current_user)) -> dict:
    orders, total = current_domain.repository_for(Order).by_user(user.id, page, limit)
    return paginated([order_view(o) for o in orders], total, page, limit)


@order_router.get("/stats")
async def order_stats(user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    return envelope(current_domain.repository_for(Order).stats())


@order_router.get("")
async def list_orders(
    status: str = "pending",
    page: int = 1,
    limit: int | None = None,
    user: User = Depends(current_user),
) -> dict:
    require_role(user, Role.ADMIN.value)
    orders, total = current_domain.repository_for(Order).by_status(status, page, limit)
    return paginated([order_view(o) for o in orders], total, page, limit)


@order_router.get("/{order_id}")
async def get_order(order_id: str, user: User = Depends(current_user)) -> dict:
    return envelope(order_view(_order_for(order_id, user)))


@order_router.put("/{order_id}/status")
async def update_status(order_id: str, body: UpdateOrderStatusRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    command = UpdateOrderStatus(order_id=order_id, status=body.status, note=body.note, updated_by=user.id)
    current_domain.process(command, asynchronous=False)
    return envelope(order_view(current_domain.repository_for(Order).get(order_id)), "Order status updated")


@order_router.put("/{order_id}/cancel")
async def cancel_order(order_id: str, body: CancelOrderRequest, user: User = Depends(current_user)) -> dict:
    _order_for(order_id, user)
    current_domain.process(
        CancelOrder(order_id=order_id, reason=body.reason, cancelled_by=user.id),
        asynchronous=False,
    )
    return envelope(order_view(current_domain.repository_for(Order).get(order_id)), "Order cancelled")


@order_router.post("/{order_id}/refund")
async def refund_order(order_id: str, body: RefundOrderRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    command = RefundOrder(order_id=order_id, amount=body.amount, reason=body.reason, processed_by=user.id)
    current_domain.process(command, asynchronous=False)
    return envelope(order_view(current_domain.repository_for(Order).get(order_id)), "Refund processed")


@order_router.post("/{order_id}/payment")
async def record_payment(order_id: str, body: RecordPaymentRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    command = RecordPayment(
        order_id=order_id,
        transaction_id=body.transaction_id,
        gateway=body.gateway,
        payment_intent_id=body.payment_intent_id,
    )
    current_domain.process(command, asynchronous=False)
    return envelope(order_view(current_domain.repository_for(Order).get(order_id)), "Payment recorded")


@order_router.post("/{order_id}/payment-failure")
async def record_payment_failure(
    order_id: str, body: PaymentFailureRequest, user: User = Depends(current_user)
) -> dict:
    require_role(user, Role.ADMIN.value)
    current_domain.process(RecordPaymentFailure(order_id=order_id, reason=body.reason), asynchronous=False)
    return envelope(order_view(current_domain.repository_for(Order).get(order_id)), "Payment failure recorded")


@order_router.put("/{order_id}/tracking")
async def add_tracking(order_id: str, body: AddTrackingRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    command = AddTracking(
        order_id=order_id,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        estimated_delivery=body.estimated_delivery,
    )
    current_domain.process(command, asynchronous=False)
    return envelope(order_view(current_domain.repository_for(Order).get(order_id)), "Tracking added")
