"""Utility helpers for Kiln."""
