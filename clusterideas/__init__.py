"""Cluster Ideas - user-defined record schemas for personal structured notes."""

__version__ = "0.1.0"
