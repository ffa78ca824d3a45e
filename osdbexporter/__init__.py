"""Prometheus-style gauges for OpenStack identity, container infrastructure and shared file systems."""

__version__ = "0.1.0"
__all__ = ["metrics", "keystone", "magnum", "manila"]