"""Deck chat orchestration and the message log."""
