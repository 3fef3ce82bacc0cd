"""Prometheus metrics for the member portal.

Defines operational metrics for the retention job and data subject requests.
"""

from prometheus_client import Counter, Histogram

# Retention engine metrics
retention_rows_processed_total = Counter(
    "memberportal_retention_rows_processed_total",
    "Rows transitioned by the retention engine",
    ["category"]  # users_soft_deleted|users_anonymised|event_registrations_deleted|...
)

retention_row_failures_total = Counter(
    "memberportal_retention_row_failures_total",
    "Rows skipped by the retention engine because their mutation failed",
    ["pass_name"]
)

retention_run_duration_seconds = Histogram(
    "memberportal_retention_run_duration_seconds",
    "Duration of a complete retention run in seconds",
    buckets=[0.5, 1.0, 5.0, 15.0, 60.0, 300.0, 900.0, 3600.0]
)

retention_runs_total = Counter(
    "memberportal_retention_runs_total",
    "Retention runs by outcome",
    ["status"]  # completed|failed|skipped
)

# Data subject request metrics
dsr_requests_submitted_total = Counter(
    "memberportal_dsr_requests_submitted_total",
    "Data subject requests submitted by members",
    ["request_type"]  # correction|deletion
)

data_exports_total = Counter(
    "memberportal_data_exports_total",
    "Personal data exports served to members"
)
