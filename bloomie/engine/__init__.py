"""Stateless analysis layer: statistics, trends, and alert synthesis."""
