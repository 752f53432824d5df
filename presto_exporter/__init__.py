"""Prometheus exporter for Presto cluster and query statistics."""

__version__ = "0.1.0"
