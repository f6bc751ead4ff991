"""Shared helpers for Podita."""
