"""Helpers shared by the exporter's poll loops: logging, metric naming, backoff."""
