"""
Prometheus metrics for oracle-priority.
"""

from prometheus_client import Counter, Gauge, Histogram


# =============================================================================
# Resolution Metrics
# =============================================================================

price_resolutions_total = Counter(
    'oracle_priority_price_resolutions_total',
    'Total successful price resolutions',
    ['asset', 'source']
)

price_resolution_failures_total = Counter(
    'oracle_priority_price_resolution_failures_total',
    'Total resolve calls that ended without a price',
    ['asset', 'reason']
)

source_read_failures_total = Counter(
    'oracle_priority_source_read_failures_total',
    'Price source reads that produced no reading',
    ['source']
)

price_resolution_latency_seconds = Histogram(
    'oracle_priority_price_resolution_latency_seconds',
    'Time spent resolving a price',
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5)
)


# =============================================================================
# Record Metrics
# =============================================================================

recent_price = Gauge(
    'oracle_priority_recent_price',
    'Most recently resolved price in natural units',
    ['asset']
)

last_update_timestamp = Gauge(
    'oracle_priority_last_update_timestamp',
    'Unix timestamp of the most recent resolution',
    ['asset']
)

priority_updates_total = Counter(
    'oracle_priority_priority_updates_total',
    'Priority update attempts',
    ['status']
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_resolution(asset: str, source: str, price: float, timestamp: int, latency_seconds: float = 0):
    """Record a successful resolution."""
    price_resolutions_total.labels(asset=asset, source=source).inc()
    recent_price.labels(asset=asset).set(price)
    last_update_timestamp.labels(asset=asset).set(timestamp)
    if latency_seconds > 0:
        price_resolution_latency_seconds.observe(latency_seconds)


def record_resolution_failure(asset: str, reason: str):
    """Record a resolve call that stored nothing."""
    price_resolution_failures_total.labels(asset=asset, reason=reason).inc()


def record_source_failure(source: str):
    source_read_failures_total.labels(source=source).inc()


def record_priority_update(accepted: bool):
    """Record a priority update attempt."""
    priority_updates_total.labels(status='accepted' if accepted else 'rejected').inc()
