"""Prometheus metrics for Sheetfolio.

Exposes an HTTP endpoint (default :9090/metrics) that Prometheus can scrape.
All metric objects are module-level singletons; import and use directly.

Metrics exposed:
  sheetfolio_ledger_requests_total            counter    action=<name>, result=ok|remote_error|connectivity_error
  sheetfolio_ledger_request_duration_seconds  histogram  action=<name>
  sheetfolio_positions_imported_total         counter
  sheetfolio_commands_total                   counter    command=<name>, success=true|false
"""
import logging

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

ledger_requests_total = Counter(
    "sheetfolio_ledger_requests_total",
    "Number of calls made to the Ledger Service",
    ["action", "result"],   # read|add|update|delete|bulkAdd, "ok" | "remote_error" | "connectivity_error"
)

ledger_request_duration_seconds = Histogram(
    "sheetfolio_ledger_request_duration_seconds",
    "Wall-clock duration of a Ledger Service call (seconds)",
    ["action"],
    buckets=[0.25, 0.5, 1, 2, 5, 10, 30],
)

positions_imported_total = Counter(
    "sheetfolio_positions_imported_total",
    "Number of positions submitted through CSV imports",
)

commands_total = Counter(
    "sheetfolio_commands_total",
    "Number of bot write-commands executed",
    ["command", "success"],   # success = "true" | "false"
)


# ---------------------------------------------------------------------------
# Server bootstrap
# ---------------------------------------------------------------------------

def start_metrics_server(port: int = 9090) -> None:
    """Start the Prometheus metrics HTTP server in a background thread.

    Logs a warning and continues if the port is already in use.
    """
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server listening on :{port}/metrics")
    except OSError as exc:
        logger.warning(f"Could not start metrics server on port {port}: {exc}")
