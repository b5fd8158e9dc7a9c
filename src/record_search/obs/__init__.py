"""Logging setup and search tracing."""
