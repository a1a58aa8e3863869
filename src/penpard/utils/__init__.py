"""Utility helpers for PenPard."""
