"""Frozen-tree queries and inspection helpers."""
