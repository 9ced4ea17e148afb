"""Contributor identities."""
