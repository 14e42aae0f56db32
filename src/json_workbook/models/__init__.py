"""Data models for the JSON Workbook codec."""

from .row import Row

__all__ = ["Row"]
