"""Derived aggregate values."""
