"""Bloomie — care-pattern health alerts for babies, pets, and plants."""

__version__ = "0.3.0"
