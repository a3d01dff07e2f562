"""Prometheus metrics for booking transitions, quotes and transport retries."""

from prometheus_client import Counter

booking_transitions_total = Counter(
    "booking_transitions_total",
    "Booking lifecycle operations by outcome",
    ["operation", "outcome"],
)

booking_quotes_total = Counter(
    "booking_quotes_total",
    "Price breakdowns computed",
    ["provider_kind"],
)

transport_retries_total = Counter(
    "transport_retries_total",
    "Transport requests retried after a credential refresh",
    ["reason"],
)


class PrometheusBookingMetrics:
    """Prometheus-based booking metrics implementation."""

    def inc_transition(self, operation: str, outcome: str) -> None:
        """Count a lifecycle operation attempt."""
        booking_transitions_total.labels(operation=operation, outcome=outcome).inc()

    def inc_quote(self, provider_kind: str) -> None:
        """Count a computed quote."""
        booking_quotes_total.labels(provider_kind=provider_kind).inc()


class PrometheusTransportMetrics:
    """Prometheus-based transport metrics implementation."""

    def inc_retry(self, reason: str) -> None:
        """Count a refresh-and-retry."""
        transport_retries_total.labels(reason=reason).inc()
