"""Delivery errors — one exception type tagged with the kind of failure.

Every failed operation raises ``DeliveryError``. Callers branch on
``error.kind`` and read the data that kind carries:

    INVALID_ARGUMENT             messages
    ORDER_NOT_FOUND              order_id
    INVALID_ORDER_STATUS         order_id, current_status, attempted_status
    RESTAURANT_BUSY              restaurant_id, reason
    DELIVERY_PERSON_UNAVAILABLE  order_id, courier_id
    PAYMENT_FAILED               order_id, amount, reason

``messages`` is always populated as ``{field: [message, ...]}``.
"""

from enum import Enum


class ErrorKind(Enum):
    INVALID_ARGUMENT = "Invalid_Argument"
    ORDER_NOT_FOUND = "Order_Not_Found"
    INVALID_ORDER_STATUS = "Invalid_Order_Status"
    RESTAURANT_BUSY = "Restaurant_Busy"
    DELIVERY_PERSON_UNAVAILABLE = "Delivery_Person_Unavailable"
    PAYMENT_FAILED = "Payment_Failed"


# Business conditions the caller is expected to handle (retry, pick another
# restaurant or courier), as opposed to requests that were wrong.
_RECOVERABLE_KINDS = {
    ErrorKind.RESTAURANT_BUSY,
    ErrorKind.DELIVERY_PERSON_UNAVAILABLE,
    ErrorKind.PAYMENT_FAILED,
}


class DeliveryError(Exception):
    def __init__(
        self,
        kind: ErrorKind,
        messages: dict[str, list[str]],
        *,
        order_id: str | None = None,
        current_status=None,
        attempted_status=None,
        restaurant_id: str | None = None,
        courier_id: str | None = None,
        amount: float | None = None,
        reason: str | None = None,
    ) -> None:
        self.kind = kind
        self.messages = messages
        self.order_id = order_id
        self.current_status = current_status
        self.attempted_status = attempted_status
        self.restaurant_id = restaurant_id
        self.courier_id = courier_id
        self.amount = amount
        self.reason = reason
        super().__init__(self._summary())

    def _summary(self) -> str:
        details = "; ".join(f"{field}: {', '.join(msgs)}" for field, msgs in self.messages.items())
        return f"{self.kind.value}: {details}"

    @property
    def is_recoverable(self) -> bool:
        return self.kind in _RECOVERABLE_KINDS

    def to_dict(self) -> dict:
        """Flatten the error for structured logging."""
        data = {"kind": self.kind.value, "messages": self.messages}
        for key in ("order_id", "restaurant_id", "courier_id", "amount", "reason"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.current_status is not None:
            data["current_status"] = self.current_status.value
        if self.attempted_status is not None:
            data["attempted_status"] = self.attempted_status.value
        return data

    # -------------------------------------------------------------------
    # Constructors, one per kind
    # -------------------------------------------------------------------
    @classmethod
    def invalid_argument(cls, messages: dict[str, list[str]]) -> "DeliveryError":
        return cls(ErrorKind.INVALID_ARGUMENT, messages)

    @classmethod
    def order_not_found(cls, order_id: str) -> "DeliveryError":
        return cls(
            ErrorKind.ORDER_NOT_FOUND,
            {"order_id": [f"Order {order_id} does not exist"]},
            order_id=order_id,
        )

    @classmethod
    def invalid_order_status(cls, order_id: str, current_status, attempted_status) -> "DeliveryError":
        return cls(
            ErrorKind.INVALID_ORDER_STATUS,
            {"status": [f"Cannot transition order {order_id} from {current_status.value} to {attempted_status.value}"]},
            order_id=order_id,
            current_status=current_status,
            attempted_status=attempted_status,
        )

    @classmethod
    def restaurant_busy(cls, restaurant_id: str, reason: str) -> "DeliveryError":
        return cls(
            ErrorKind.RESTAURANT_BUSY,
            {"restaurant_id": [f"Restaurant {restaurant_id} cannot accept orders: {reason}"]},
            restaurant_id=restaurant_id,
            reason=reason,
        )

    @classmethod
    def delivery_person_unavailable(cls, order_id: str, courier_id: str) -> "DeliveryError":
        return cls(
            ErrorKind.DELIVERY_PERSON_UNAVAILABLE,
            {"courier_id": [f"Courier {courier_id} is not available for order {order_id}"]},
            order_id=order_id,
            courier_id=courier_id,
        )

    @classmethod
    def payment_failed(cls, order_id: str, amount: float, reason: str) -> "DeliveryError":
        return cls(
            ErrorKind.PAYMENT_FAILED,
            {"payment": [f"Payment of {amount:.2f} for order {order_id} failed: {reason}"]},
            order_id=order_id,
            amount=amount,
            reason=reason,
        )
