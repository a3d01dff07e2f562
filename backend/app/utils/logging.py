"""Structured logging for booking lifecycle events."""

import logging
from typing import Any

from backend.app.models.booking import Booking
from backend.app.models.common import ActorRole, BookingOperation

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the application process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class StructuredBookingLogger:
    """Structured logger for lifecycle operations."""

    def log_transition(
        self,
        operation: BookingOperation,
        actor: ActorRole,
        outcome: str,
        booking: Booking | None = None,
        booking_id: str | None = None,
        error_code: str | None = None,
    ) -> None:
        """Log a lifecycle operation with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation.value,
            "actor": actor.value,
            "outcome": outcome,
            "booking_id": booking.id if booking else booking_id,
        }

        if booking is not None:
            log_data["status"] = booking.status.value
            log_data["provider"] = f"{booking.provider.kind.value}:{booking.provider.id}"

        if error_code:
            log_data["error_code"] = error_code

        log_msg = f"Booking {operation.value} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
