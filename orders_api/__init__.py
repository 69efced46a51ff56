"""
Orders API
A small order-management service instrumented with OpenTelemetry traces, metrics and logs.
"""

__version__ = "0.1.0"
__author__ = "Observability Team"
