"""Deck and slide management service."""
