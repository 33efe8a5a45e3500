"""Metrics for Fortigate firewalls collected through the FortiOS REST API."""

__version__ = "1.0.0"