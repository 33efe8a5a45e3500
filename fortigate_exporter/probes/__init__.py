"""Probes that turn FortiOS API responses into metrics."""