"""Zoom animation planning."""
