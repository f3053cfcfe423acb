"""Stockfly configuration properties."""
