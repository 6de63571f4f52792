"""Utility helpers shared across the iEnhance package."""
