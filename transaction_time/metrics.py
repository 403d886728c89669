"""Prometheus metrics for the transaction time filter"""
from prometheus_client import Counter, Gauge, Histogram

EVENTS_PROCESSED = Counter(
    'transaction_time_events_total',
    'Events seen by the transaction time filter',
    ['outcome']
)
TRANSACTIONS_EXPIRED = Counter(
    'transaction_time_expired_total',
    'Transactions dropped after reaching the timeout',
    ['released']
)
OPEN_TRANSACTIONS = Gauge(
    'transaction_time_open_transactions',
    'Transactions waiting for their second event'
)
TRANSACTION_DURATION = Histogram(
    'transaction_time_duration_seconds',
    'Elapsed time of completed transactions',
    buckets=(0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30, 60, 120, 300, 600)
)
