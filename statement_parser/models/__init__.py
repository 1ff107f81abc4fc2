"""Parsed statement models."""
