"""
Collector Metrics
=================
Prometheus metrics for OTP gating, ledger writes and notification delivery.
"""

from prometheus_client import CollectorRegistry, Counter, Gauge, make_asgi_app

COLLECTOR_REGISTRY = CollectorRegistry()

OTP_ISSUED = Counter(
    name="otp_issued_total",
    documentation="OTP codes issued",
    registry=COLLECTOR_REGISTRY,
)

OTP_VERIFICATIONS = Counter(
    name="otp_verifications_total",
    documentation="OTP verification attempts by outcome",
    labelnames=["outcome"],
    registry=COLLECTOR_REGISTRY,
)

LEDGER_APPENDS = Counter(
    name="ledger_appends_total",
    documentation="Ledger appends by outcome",
    labelnames=["outcome"],
    registry=COLLECTOR_REGISTRY,
)

LEDGER_REPAIRS = Counter(
    name="ledger_repairs_total",
    documentation="Ledger repair runs by whether the file changed",
    labelnames=["changed"],
    registry=COLLECTOR_REGISTRY,
)

NOTIFICATIONS = Counter(
    name="notifications_total",
    documentation="Ledger notifications by final outcome",
    labelnames=["outcome"],
    registry=COLLECTOR_REGISTRY,
)

NOTIFICATION_ATTEMPTS = Counter(
    name="notification_attempts_total",
    documentation="Individual outbound send attempts",
    labelnames=["outcome"],
    registry=COLLECTOR_REGISTRY,
)

SENDS_INFLIGHT = Gauge(
    name="notification_sends_inflight",
    documentation="Outbound sends currently holding an admission slot",
    registry=COLLECTOR_REGISTRY,
)

SENDS_WAITING = Gauge(
    name="notification_sends_waiting",
    documentation="Outbound sends queued for an admission slot",
    registry=COLLECTOR_REGISTRY,
)


def get_metrics_app():
    """ASGI app serving the collector registry, for mounting at /metrics."""
    return make_asgi_app(registry=COLLECTOR_REGISTRY)
