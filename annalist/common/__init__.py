"""Shared helpers used across Annalist modules."""
