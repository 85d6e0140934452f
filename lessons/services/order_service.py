"""Order service - places orders against the capacity ledger.

An order moves Received -> Validated -> Reserved -> Persisted -> Confirmed.
A rejection at any gate leaves nothing behind: validation failures never reach
the ledger, ledger failures never reach the order store, and a failed write
hands the reserved seats back before the error surfaces.

Without an idempotency key a client that retries a POST after a timeout can
reserve seats twice; callers that retry should always send one.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from lessons.domain import LessonId, Order, OrderId, OrderLine, SeatCount, coalesce_lines
from lessons.domain.errors import (
    IdempotencyKeyReusedError,
    InvalidLessonIdError,
    InvalidOrderIdError,
    OrderNotFoundError,
    TransientError,
    ValidationError,
)
from lessons.services.capacity_ledger import CapacityLedger
from lessons.stores.interfaces import DuplicateIdempotencyKeyError, OrderStore, StoreUnavailableError

MAX_IDEMPOTENCY_KEY_LENGTH = 255


class OrderService:
    """Service for placing and looking up orders."""

    def __init__(self, orders: OrderStore, ledger: CapacityLedger) -> None:
        self._orders = orders
        self._ledger = ledger

    def create_order(
        self,
        name: str,
        phone: str,
        lines: Iterable[Mapping[str, Any]],
        idempotency_key: str | None = None,
    ) -> Order:
        """Reserve seats for every line and store the order.

        Raises:
            ValidationError: Malformed request; nothing was touched.
            LessonNotFoundError: A line names an unknown lesson.
            InsufficientCapacityError: A lesson does not have enough seats left.
            IdempotencyKeyReusedError: The key belongs to a different order.
            TransientError: Storage failed; any reservation has been released.
        """
        name, phone, order_lines, idempotency_key = self._validate(
            name, phone, lines, idempotency_key
        )

        if idempotency_key is not None:
            existing = self._lookup_key(idempotency_key)
            if existing is not None:
                return self._replay(existing, name, phone, order_lines)

        demand = coalesce_lines((line.lesson_id, line.seats.value) for line in order_lines)
        try:
            token = self._ledger.reserve_many(demand.items())
        except StoreUnavailableError as exc:
            raise TransientError() from exc
        logger.debug("Order for {} reserved under token {}", name, token.id)

        order = Order.place(name, phone, order_lines, idempotency_key)
        try:
            self._orders.save_order(order)
        except DuplicateIdempotencyKeyError:
            logger.info("Concurrent request already stored key {}", idempotency_key)
            self._release(token)
            existing = self._lookup_key(idempotency_key)
            if existing is None:
                raise TransientError()
            return self._replay(existing, name, phone, order_lines)
        except StoreUnavailableError as exc:
            logger.error("Storing order {} failed, releasing token {}", order.id, token.id)
            self._release(token)
            raise TransientError() from exc
        except BaseException:
            # worker interrupted or unexpected fault: the seats still come back
            self._release(token)
            raise

        logger.info(
            "Order {} confirmed: {} seats across {} lessons",
            order.id,
            sum(demand.values()),
            len(demand),
        )
        return order

    def get_order(self, order_id: str) -> Order:
        """Return an order by ID.

        Raises:
            InvalidOrderIdError: If the order_id is not a valid UUID.
            OrderNotFoundError: If the order does not exist.
        """
        try:
            parsed = OrderId.from_string(order_id)
        except ValueError:
            raise InvalidOrderIdError(order_id)
        try:
            order = self._orders.get_order(parsed)
        except StoreUnavailableError as exc:
            raise TransientError() from exc
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def _validate(self, name, phone, lines, idempotency_key):
        problems: dict[str, str] = {}
        name = name.strip() if isinstance(name, str) else ""
        phone = phone.strip() if isinstance(phone, str) else ""
        if not name:
            problems["name"] = "Name is required"
        if not phone:
            problems["phone"] = "Phone is required"

        raw_lines = list(lines or ())
        if not raw_lines:
            problems["lines"] = "At least one line is required"

        if idempotency_key is not None:
            idempotency_key = str(idempotency_key).strip()
            if not idempotency_key or len(idempotency_key) > MAX_IDEMPOTENCY_KEY_LENGTH:
                problems["idempotency_key"] = (
                    f"Idempotency key must be 1-{MAX_IDEMPOTENCY_KEY_LENGTH} characters"
                )

        order_lines: list[OrderLine] = []
        for index, raw in enumerate(raw_lines):
            try:
                order_lines.append(self._parse_line(raw))
            except InvalidLessonIdError:
                problems[f"lines[{index}].lesson_id"] = "Invalid lesson ID format"
            except ValueError as exc:
                problems[f"lines[{index}]"] = str(exc)

        if problems:
            logger.info("Rejected order request: {}", problems)
            raise ValidationError("Order request is invalid", fields=problems)
        return name, phone, tuple(order_lines), idempotency_key

    @staticmethod
    def _parse_line(raw: Mapping[str, Any]) -> OrderLine:
        if not isinstance(raw, Mapping):
            raise ValueError("Each line must be an object with lesson_id and seats")
        lesson_id = raw.get("lesson_id")
        try:
            parsed_id = LessonId.from_string(lesson_id)
        except (TypeError, ValueError):
            raise InvalidLessonIdError(lesson_id)
        return OrderLine(lesson_id=parsed_id, seats=SeatCount(raw.get("seats")))

    def _lookup_key(self, key: str) -> Order | None:
        try:
            return self._orders.get_order_by_idempotency_key(key)
        except StoreUnavailableError as exc:
            raise TransientError() from exc

    @staticmethod
    def _replay(existing: Order, name: str, phone: str, lines: tuple[OrderLine, ...]) -> Order:
        requested = coalesce_lines((line.lesson_id, line.seats.value) for line in lines)
        if (existing.name, existing.phone, existing.seats_by_lesson) != (name, phone, requested):
            raise IdempotencyKeyReusedError(existing.idempotency_key)
        logger.info("Replayed order {} for key {}", existing.id, existing.idempotency_key)
        return existing

    def _release(self, token) -> None:
        try:
            self._ledger.release(token)
        except StoreUnavailableError as exc:
            logger.error("Could not release token {}: storage unavailable", token.id)
            raise TransientError() from exc
