"""Stateful consumers of the engine: stores and the alert feed."""
