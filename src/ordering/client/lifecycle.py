"""Order lifecycle controller — role-gated status transitions from the client.

The controller refuses edges that are not in the transition table before any
network call, requires picker verification before ``prepared``, and then runs
the store's atomic status procedure with the status it last saw as the
expected value. Every outcome comes back as a discriminated result:

* ``illegal_transition`` — the edge or role is not allowed; never retried.
* ``verification_failed`` — item counts do not match; the operator corrects them.
* ``conflict`` — the order changed underneath the caller; refresh before retrying.
* ``network`` — the store could not be reached.
"""

from dataclasses import dataclass, field
from enum import Enum

import structlog

from ordering.order.order import ActorRole, OrderStatus, is_legal_transition
from ordering.picking.verification import ItemDiscrepancy, PickerWorkbench
from ordering.store.port import OrderStorePort, StoreUnavailableError
from shared.result import Err, Ok, Result

logger = structlog.get_logger(__name__)


class TransitionErrorKind(Enum):
    ILLEGAL_TRANSITION = "illegal_transition"
    VERIFICATION_FAILED = "verification_failed"
    CONFLICT = "conflict"
    NETWORK = "network"


@dataclass(frozen=True)
class TransitionError:
    kind: TransitionErrorKind
    message: str
    from_status: str | None = None
    to_status: str | None = None
    actor_role: str | None = None
    discrepancies: list[ItemDiscrepancy] = field(default_factory=list)

    @property
    def requires_refresh(self) -> bool:
        return self.kind == TransitionErrorKind.CONFLICT

    @property
    def retryable(self) -> bool:
        return self.kind in (TransitionErrorKind.CONFLICT, TransitionErrorKind.NETWORK)


class OrderLifecycleController:
    """Issues status transitions for one actor session."""

    def __init__(self, store: OrderStorePort, workbench: PickerWorkbench | None = None):
        self.store = store
        self.workbench = workbench

    def _illegal(self, current, target, role, reason=None) -> Err:
        message = reason or f"Cannot transition from {current} to {target} as {role}"
        return Err(
            TransitionError(
                kind=TransitionErrorKind.ILLEGAL_TRANSITION,
                message=message,
                from_status=current,
                to_status=target,
                actor_role=role,
            )
        )

    async def transition(
        self,
        order_id: str,
        target_status,
        actor_role,
        actor_id: str | None = None,
    ) -> Result:
        """Move ``order_id`` to ``target_status``. Returns ``Ok(order)`` or ``Err(TransitionError)``."""
        target_value = getattr(target_status, "value", target_status)
        role_value = getattr(actor_role, "value", actor_role)

        try:
            order = await self.store.get_order(order_id)
        except StoreUnavailableError as exc:
            return Err(TransitionError(kind=TransitionErrorKind.NETWORK, message=str(exc)))

        if order is None:
            return Err(
                TransitionError(
                    kind=TransitionErrorKind.CONFLICT,
                    message=f"Order {order_id} no longer exists",
                    to_status=target_value,
                    actor_role=role_value,
                )
            )

        current = order.status
        try:
            target = OrderStatus(target_value)
            role = ActorRole(role_value)
        except ValueError as exc:
            return self._illegal(current, target_value, role_value, reason=str(exc))

        if not is_legal_transition(OrderStatus(current), target, role):
            logger.info(
                "Illegal transition refused",
                order_id=str(order_id),
                from_status=current,
                to_status=target.value,
                actor_role=role.value,
            )
            return self._illegal(current, target.value, role.value)

        if target == OrderStatus.PREPARED:
            if self.workbench is None:
                return self._illegal(current, target.value, role.value, reason="Picker verification is required")
            verification = self.workbench.validate(order)
            if not verification.ok:
                return Err(
                    TransitionError(
                        kind=TransitionErrorKind.VERIFICATION_FAILED,
                        message="; ".join(d.message for d in verification.error),
                        from_status=current,
                        to_status=target.value,
                        actor_role=role.value,
                        discrepancies=verification.error,
                    )
                )

        try:
            response = await self.store.update_order_status(
                order_id,
                target.value,
                role.value,
                actor_id=actor_id,
                expected_status=current,
            )
        except StoreUnavailableError as exc:
            logger.warning("Status update failed", order_id=str(order_id), error=str(exc))
            return Err(
                TransitionError(
                    kind=TransitionErrorKind.NETWORK,
                    message=str(exc),
                    from_status=current,
                    to_status=target.value,
                    actor_role=role.value,
                )
            )

        if not response.get("success"):
            kind = TransitionErrorKind.CONFLICT if response.get("conflict") else TransitionErrorKind.ILLEGAL_TRANSITION
            return Err(
                TransitionError(
                    kind=kind,
                    message=response.get("error") or "Status update refused",
                    from_status=current,
                    to_status=target.value,
                    actor_role=role.value,
                )
            )

        if self.workbench is not None and target != OrderStatus.PREPARING:
            self.workbench.clear(order_id)

        logger.info(
            "Order transitioned",
            order_id=str(order_id),
            from_status=current,
            to_status=target.value,
            actor_role=role.value,
        )
        return Ok(response["order"])
