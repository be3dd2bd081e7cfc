"""
Prometheus metrics definitions for the API.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Upload protocol metrics
upload_requests_total = Counter(
    'upload_requests_total',
    'Total upload credentials issued'
)

uploads_finalized_total = Counter(
    'uploads_finalized_total',
    'Total uploads committed to the registry'
)

upload_rejections_total = Counter(
    'upload_rejections_total',
    'Upload protocol calls rejected, by operation and error code',
    ['operation', 'code']
)

upload_size_bytes = Histogram(
    'upload_size_bytes',
    'Size of committed uploads in bytes',
    buckets=[
        64 * 1024, 512 * 1024, 1024 ** 2, 5 * 1024 ** 2, 20 * 1024 ** 2,
        50 * 1024 ** 2, 100 * 1024 ** 2, 200 * 1024 ** 2
    ]
)
