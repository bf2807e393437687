"""Shared type aliases for the core and domain layers."""
from typing import Literal

FlashDirection = Literal["credit", "debit"]
TextDisplayMode = Literal["instant", "step"]
Severity = Literal["ERROR", "WARN"]

__all__ = ["FlashDirection", "Severity", "TextDisplayMode"]
