"""Command line interface for Cluster Ideas."""
