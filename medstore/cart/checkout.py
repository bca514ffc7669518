"""Turn the cart into an order request for the order-placement backend."""
from typing import Mapping, Union

from pydantic import ValidationError

from medstore.errors import ERROR_CART_EMPTY, ERROR_INVALID_PHONE, CheckoutError
from medstore.logging import get_logger, sanitize_string_for_logging
from medstore.models import OrderLine, OrderRequest, PaymentMethod, ShippingAddress
from .service import CartStore

logger = get_logger(__name__)


def _shipping_error_message(error: ValidationError) -> str:
    """First validation problem, phrased the way the checkout form shows it."""
    first = error.errors()[0]
    field = str(first["loc"][0]) if first["loc"] else "address"
    if first["type"] in ("missing", "string_too_short"):
        # postal_code / postalCode -> "postal code"
        readable = field.replace("_", " ").replace("postalCode", "postal code")
        return f"Please enter your {readable}"
    if field == "phone":
        return ERROR_INVALID_PHONE
    return f"Invalid {field}: {first['msg']}"


def build_order_request(
    store: CartStore,
    shipping_address: Union[ShippingAddress, Mapping],
    payment_method: Union[PaymentMethod, str] = PaymentMethod.COD,
) -> OrderRequest:
    """
    Build the order request for the current cart contents.

    The cart is left untouched; clear it once the backend accepts the order.

    Raises:
        CheckoutError: If the cart is empty or the address/payment method is invalid
    """
    items = store.items
    if not items:
        raise CheckoutError(ERROR_CART_EMPTY)

    if isinstance(shipping_address, ShippingAddress):
        address = shipping_address
    else:
        try:
            address = ShippingAddress.model_validate(dict(shipping_address))
        except ValidationError as e:
            raise CheckoutError(_shipping_error_message(e))

    try:
        method = PaymentMethod(payment_method)
    except ValueError:
        raise CheckoutError(f"Unsupported payment method: {payment_method}")

    request = OrderRequest(
        items=[OrderLine(product=item.product_ref, quantity=item.quantity) for item in items],
        shipping_address=address,
        payment_method=method,
        expected_total=store.get_total_price(),
    )
    logger.info(
        f"Order request built: {len(request.items)} lines, total {request.expected_total}, "
        f"{method.value} to {sanitize_string_for_logging(address.city)}"
    )
    return request
