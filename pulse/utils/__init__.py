"""Utility package initialization."""
