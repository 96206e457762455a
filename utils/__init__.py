"""Tabular views and text export helpers."""
