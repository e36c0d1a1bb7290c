"""Order service layer (Use Cases).

Orchestrates the order lifecycle: creation, confirmation with stock
reservation, vehicle assignment, status transitions and cancellation.
All write operations are atomic; the service defines the unit-of-work
boundary and every collaborator joins its transaction.

Business rules enforced:
- Client and material must exist and be active to create an order.
- Stock is checked on creation (advisory) and reserved on confirmation
  through ``StockLedger.reserve``, a single conditional update.
- Status changes follow ``VALID_TRANSITIONS``; each one writes a history
  row and an outbox event.  CONFIRMED, ASSIGNED and CANCELLED are reached
  only through their own use cases, never through ``transition``.
- A vehicle is taken with a conditional AVAILABLE -> IN_USE write, so it
  serves at most one order.
- Cancelling a CONFIRMED/ASSIGNED order returns its stock and, when
  assigned, its vehicle.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.clients.exceptions import ClientNotFound
from modules.core.exceptions import ValidationError
from modules.materials.exceptions import MaterialUnavailable
from modules.orders.constants import (
    DEDICATED_OPERATIONS,
    QUANTITY_PLACES,
    STOCK_RESERVED_STATES,
    OrderStatus,
    next_states,
)
from modules.orders.dtos import AssignmentResult, ConfirmationResult, TrackingInfo
from modules.orders.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderCreated,
    OrderStatusChanged,
    VehicleAssigned,
)
from modules.orders.exceptions import (
    InvalidStatusTransition,
    OrderNotFound,
    StatusRequiresOperation,
    TrackingCodeConflict,
    UnknownOrderStatus,
)
from modules.orders.tracking import clean_tracking_code, next_tracking_code
from modules.stock.alerts import emit_stock_alerts
from modules.stock.exceptions import InsufficientStock
from modules.vehicles.assignment import (
    DeliveryRequest,
    build_justification,
    estimate_delivery_minutes,
    format_quantity,
    score_vehicles,
    select_vehicle,
)
from modules.vehicles.constants import VehicleStatus
from modules.vehicles.exceptions import VehicleUnavailable

if TYPE_CHECKING:
    from modules.clients.repositories.interfaces import IClientRepository
    from modules.materials.repositories.interfaces import IMaterialRepository
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.stock.services import StockLedger
    from modules.vehicles.services import VehicleService
    from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories and the stock/fleet services via constructor
    injection (DIP).  ``clock`` defaults to ``django.utils.timezone.now``
    and feeds assignment scoring and the delivery estimate.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        client_repository: IClientRepository,
        material_repository: IMaterialRepository,
        stock_ledger: StockLedger,
        vehicle_service: VehicleService,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._order_repo = order_repository
        self._client_repo = client_repository
        self._material_repo = material_repository
        self._ledger = stock_ledger
        self._vehicles = vehicle_service
        self._clock = clock or timezone.now

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(
        self,
        dto: CreateOrderDTO,
        client_id: int,
        actor_id: Optional[int] = None,
    ) -> Order:
        """Create a PENDING order.

        Steps:
        1. Validate client exists and is active.
        2. Validate material exists and is active; snapshot its price.
        3. Advisory stock check (nothing is reserved yet).
        4. Allocate a tracking code and insert the order.
        5. Record the initial history row and ``OrderCreated``.

        No tracking code is allocated when steps 1-3 fail.

        Raises:
            ClientNotFound: client missing or inactive.
            MaterialUnavailable: material missing or inactive.
            InsufficientStock: not enough stock right now.
            TrackingCodeConflict: no unique code after the retry budget.
        """
        log = logger.bind(client_id=client_id, material_id=dto.material_id)
        log.info("order.creation_started", quantity=str(dto.quantity))

        client = self._client_repo.get_active(client_id)
        if client is None:
            raise ClientNotFound("Client not found or inactive.")

        material = self._material_repo.get_active(dto.material_id)
        if material is None:
            log.warning("order.material_unavailable")
            raise MaterialUnavailable(
                "Material not found or unavailable.",
                details={"material_id": dto.material_id},
            )

        availability = self._ledger.check_availability(material.id, dto.quantity)
        if not availability.available:
            log.warning(
                "order.insufficient_stock",
                available=str(availability.current_quantity),
            )
            raise InsufficientStock(
                f"Insufficient stock: requested {availability.required_quantity}, "
                f"available {availability.current_quantity}.",
                details={
                    "material_id": material.id,
                    "requested": str(availability.required_quantity),
                    "available": str(availability.current_quantity),
                },
            )

        order = self._insert_with_tracking_code(
            {
                "client_id": client.id,
                "material_id": material.id,
                "quantity": dto.quantity,
                "unit_price": material.price_per_unit,
                "total_price": (dto.quantity * material.price_per_unit).quantize(
                    QUANTITY_PLACES
                ),
                "delivery_address": dto.delivery_address,
                "delivery_latitude": dto.delivery_latitude,
                "delivery_longitude": dto.delivery_longitude,
                "contact_phone": dto.contact_phone or "",
                "requested_delivery_date": dto.requested_delivery_date,
                "notes": dto.notes,
            }
        )

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                tracking_code=order.tracking_code,
                client_id=client.id,
                material_id=material.id,
                quantity=str(order.quantity),
            )
        )
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=OrderStatus.PENDING,
            user_id=actor_id,
            notes="Order created",
        )

        log.info("order.created", order_id=order.id, tracking_code=order.tracking_code)
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def confirm_order(self, order_id: int, actor_id: Optional[int]) -> ConfirmationResult:
        """PENDING -> CONFIRMED, reserving the order quantity.

        The order row is locked first; the reservation and the status
        change commit or roll back together.

        Raises:
            OrderNotFound: order does not exist.
            InvalidStatusTransition: order is not PENDING.
            InsufficientStock: stock ran out (possibly to a concurrent
                confirmation) before the reservation.
        """
        order = self._lock_order(order_id)
        self._ensure_transition(order, OrderStatus.CONFIRMED)
        log = logger.bind(order_id=order.id, material_id=order.material_id)

        availability = self._ledger.check_availability(order.material_id, order.quantity)
        if not availability.available:
            log.warning(
                "order.confirmation_rejected",
                available=str(availability.current_quantity),
            )
            raise InsufficientStock(
                f"Insufficient stock: requested {availability.required_quantity}, "
                f"available {availability.current_quantity}.",
                details={
                    "material_id": order.material_id,
                    "requested": str(availability.required_quantity),
                    "available": str(availability.current_quantity),
                },
            )

        record = self._ledger.reserve(
            order.material_id, order.quantity, actor_id, order_id=order.id
        )
        alerts = emit_stock_alerts(record, record.available_quantity + order.quantity)

        self._apply_status(
            order,
            OrderStatus.CONFIRMED,
            actor_id,
            notes="Order confirmed",
            events=[
                OrderConfirmed(
                    aggregate_id=order.id,
                    tracking_code=order.tracking_code,
                    quantity=str(order.quantity),
                )
            ],
        )
        log.info("order.confirmed", remaining=str(record.available_quantity))
        return ConfirmationResult(
            order=self._order_repo.get_by_id(order.id) or order,
            stock_record=record,
            alerts=alerts,
        )

    @transaction.atomic
    def transition(
        self,
        order_id: int,
        new_status: str,
        actor_id: Optional[int],
        notes: str = "",
    ) -> Order:
        """Move an order along ``VALID_TRANSITIONS``.

        Writes the status and a history row only, so it refuses the targets
        that move stock or vehicles: CONFIRMED, ASSIGNED and CANCELLED are
        set by ``confirm_order``, ``assign_vehicle`` and ``cancel_order``.

        Raises:
            UnknownOrderStatus: ``new_status`` is not an order status.
            OrderNotFound: order does not exist.
            InvalidStatusTransition: transition not allowed.
            StatusRequiresOperation: target has a dedicated use case.
        """
        if new_status not in OrderStatus.values:
            raise UnknownOrderStatus(
                f"Unknown status '{new_status}'. "
                f"Valid values: {', '.join(OrderStatus.values)}",
                details={"status": new_status},
            )

        order = self._lock_order(order_id)
        self._ensure_transition(order, new_status)
        operation = DEDICATED_OPERATIONS.get(new_status)
        if operation is not None:
            logger.warning(
                "order.transition_requires_operation",
                order_id=order.id,
                new_status=str(new_status),
                operation=operation,
            )
            raise StatusRequiresOperation(
                f"Status {new_status} can only be set through {operation}.",
                details={"status": str(new_status), "operation": operation},
            )
        self._apply_status(order, new_status, actor_id, notes=notes)
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def assign_vehicle(
        self,
        order_id: int,
        actor_id: Optional[int],
        vehicle_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> AssignmentResult:
        """CONFIRMED -> ASSIGNED with a vehicle.

        With ``vehicle_id`` the staff choice is validated; without it the
        assignment engine picks among AVAILABLE vehicles that can carry
        the load.

        Raises:
            OrderNotFound: order does not exist.
            InvalidStatusTransition: order is not CONFIRMED.
            VehicleNotFound: manual vehicle does not exist.
            VehicleUnavailable: manual vehicle not AVAILABLE or too small,
                or the chosen vehicle was taken concurrently.
            NoVehicleAvailable: no vehicle can carry the quantity.
        """
        now = now or self._clock()
        order = self._lock_order(order_id)
        self._ensure_transition(order, OrderStatus.ASSIGNED)
        log = logger.bind(order_id=order.id, quantity=str(order.quantity))

        request = DeliveryRequest.from_order(order)
        zones = {
            "peripheral_zones": settings.DELIVERY_PERIPHERAL_ZONES,
            "central_zones": settings.DELIVERY_CENTRAL_ZONES,
        }
        decision = None

        if vehicle_id is not None:
            vehicle = self._vehicles.get_vehicle(vehicle_id)
            self._ensure_vehicle_fits(vehicle, order)
            score = score_vehicles(request, [vehicle], now)[0]
            justification = f"Manual assignment. {build_justification(score)}"
            estimated_minutes = estimate_delivery_minutes(
                vehicle.capacity_m3, order.quantity, order.delivery_address, now, **zones
            )
        else:
            candidates = self._vehicles.list_available(order.quantity)
            decision = select_vehicle(request, candidates, now, **zones)
            vehicle = decision.vehicle
            score = decision.score
            justification = decision.justification
            estimated_minutes = decision.estimated_minutes

        vehicle = self._vehicles.mark_in_use(vehicle.id)

        order.vehicle = vehicle
        order.assignment_justification = justification
        order.estimated_delivery_minutes = estimated_minutes
        self._apply_status(
            order,
            OrderStatus.ASSIGNED,
            actor_id,
            notes=justification,
            events=[
                VehicleAssigned(
                    aggregate_id=order.id,
                    vehicle_id=vehicle.id,
                    score=score.score,
                    estimated_minutes=estimated_minutes,
                )
            ],
        )
        log.info(
            "order.vehicle_assigned",
            vehicle_id=vehicle.id,
            plate=vehicle.plate,
            score=score.score,
            automatic=vehicle_id is None,
            estimated_minutes=estimated_minutes,
        )
        return AssignmentResult(
            order=self._order_repo.get_by_id(order.id) or order,
            vehicle=vehicle,
            decision=decision,
        )

    @transaction.atomic
    def cancel_order(
        self, order_id: int, actor_id: Optional[int], notes: str = ""
    ) -> Order:
        """Cancel an order, undoing what its earlier steps took.

        From CONFIRMED or ASSIGNED the reserved quantity goes back to
        stock; from ASSIGNED the vehicle is released when it is still
        IN_USE.

        Raises:
            OrderNotFound: order does not exist.
            InvalidStatusTransition: order is IN_TRANSIT or terminal.
        """
        order = self._lock_order(order_id)
        self._ensure_transition(order, OrderStatus.CANCELLED)
        previous_status = order.status
        log = logger.bind(order_id=order.id, previous_status=previous_status)

        stock_returned = "0"
        if previous_status in STOCK_RESERVED_STATES:
            record = self._ledger.increase(order.material_id, order.quantity, actor_id)
            emit_stock_alerts(record, record.available_quantity - order.quantity)
            stock_returned = str(order.quantity)
            log.info("order.stock_returned", quantity=stock_returned)

        released_vehicle = None
        if previous_status == OrderStatus.ASSIGNED and order.vehicle_id:
            vehicle = self._vehicles.get_vehicle(order.vehicle_id)
            if vehicle.status == VehicleStatus.IN_USE:
                released_vehicle = vehicle.id
            else:
                log.warning(
                    "order.vehicle_not_in_use",
                    vehicle_id=vehicle.id,
                    vehicle_status=vehicle.status,
                )

        self._apply_status(
            order,
            OrderStatus.CANCELLED,
            actor_id,
            notes=notes or "Order cancelled",
            events=[
                OrderCancelled(
                    aggregate_id=order.id,
                    previous_status=previous_status,
                    stock_returned=stock_returned,
                    vehicle_released=released_vehicle,
                )
            ],
        )
        # the order no longer holds the vehicle once it is CANCELLED
        if released_vehicle is not None:
            self._vehicles.release(
                released_vehicle, reason=f"Order {order.tracking_code} cancelled"
            )
        log.info("order.cancelled")
        return self._order_repo.get_by_id(order.id) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: int, client_id: Optional[int] = None) -> Order:
        """Retrieve a single order by ID.

        With ``client_id`` an order of another client is reported as not
        found.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if order is None or (client_id is not None and order.client_id != client_id):
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def get_by_tracking_code(self, code: str) -> Order:
        """Raises ``InvalidTrackingCode`` or ``OrderNotFound``."""
        normalized = clean_tracking_code(code)
        order = self._order_repo.get_by_tracking_code(normalized)
        if order is None:
            raise OrderNotFound(f"No order with tracking code {normalized}.")
        return order

    def get_tracking_info(self, code: str) -> TrackingInfo:
        return TrackingInfo.from_entity(self.get_by_tracking_code(code))

    def list_orders(self, filters: Optional[Dict[str, Any]] = None):
        """Return a queryset of orders, optionally filtered."""
        return self._order_repo.list(filters)

    def list_client_orders(self, client_id: int) -> List[Order]:
        return self._order_repo.list_by_client(client_id)

    def list_pending_assignment(self) -> List[Order]:
        return self._order_repo.list_pending_assignment()

    def get_stats_by_period(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        client_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Counts per status, delivered volume and revenue for a period."""
        if start is not None and end is not None and start > end:
            raise ValidationError("Period start must not be after its end.")
        stats = self._order_repo.stats(start=start, end=end, client_id=client_id)
        stats["period"] = {
            "start": start.isoformat() if start else None,
            "end": end.isoformat() if end else None,
        }
        return stats

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_order(self, order_id: int) -> Order:
        order = self._order_repo.get_for_update(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    @staticmethod
    def _ensure_transition(order: Order, new_status: str) -> None:
        if order.can_transition_to(new_status):
            return
        allowed = next_states(order.status)
        logger.warning(
            "order.invalid_transition",
            order_id=order.id,
            current_status=order.status,
            new_status=str(new_status),
        )
        raise InvalidStatusTransition(
            f"Invalid status transition: {order.status} → {new_status}. "
            f"Allowed transitions: {', '.join(allowed) or 'none'}",
            details={
                "current": str(order.status),
                "requested": str(new_status),
                "allowed": [str(s) for s in allowed],
            },
        )

    @staticmethod
    def _ensure_vehicle_fits(vehicle: Any, order: Order) -> None:
        if vehicle.status != VehicleStatus.AVAILABLE:
            raise VehicleUnavailable(
                f"Vehicle {vehicle.plate} is not available (status: {vehicle.status}).",
                details={"vehicle_id": vehicle.id, "status": vehicle.status},
            )
        if vehicle.capacity_m3 < order.quantity:
            raise VehicleUnavailable(
                f"Vehicle {vehicle.plate} capacity ({format_quantity(vehicle.capacity_m3)} m³) "
                f"is below the order quantity ({format_quantity(order.quantity)} m³).",
                details={
                    "vehicle_id": vehicle.id,
                    "capacity_m3": str(vehicle.capacity_m3),
                    "quantity": str(order.quantity),
                },
            )

    def _apply_status(
        self,
        order: Order,
        new_status: str,
        actor_id: Optional[int],
        notes: str = "",
        events: Iterable[DomainEvent] = (),
    ) -> None:
        old_status = order.status
        order.status = new_status
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=str(old_status),
                new_status=str(new_status),
            )
        )
        for event in events:
            order.add_domain_event(event)
        self._order_repo.save(order)
        self._order_repo.add_history(
            order_id=order.id,
            status=new_status,
            old_status=old_status,
            user_id=actor_id,
            notes=notes,
        )
        logger.info(
            "order.status_changed",
            order_id=order.id,
            old_status=str(old_status),
            new_status=str(new_status),
        )

    def _insert_with_tracking_code(self, data: Dict[str, Any]) -> Order:
        """Insert the order under a fresh tracking code.

        The code is allocated outside the savepoint so a collision moves
        the sequence forward; only the insert is retried.
        """
        max_retries = settings.TRACKING_CODE_MAX_RETRIES
        for attempt in range(1, max_retries + 1):
            code = next_tracking_code()
            try:
                with transaction.atomic():
                    return self._order_repo.create({**data, "tracking_code": code})
            except IntegrityError:
                if self._order_repo.get_by_tracking_code(code) is None:
                    raise
                logger.warning(
                    "order.tracking_code_collision",
                    tracking_code=code,
                    attempt=attempt,
                )
        raise TrackingCodeConflict(
            f"Could not allocate a unique tracking code after {max_retries} attempts."
        )
