"""RVU aggregation and multi-procedure adjustment engine."""

__version__ = "0.1.0"
