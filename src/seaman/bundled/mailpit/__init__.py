"""Mailpit mail catcher plugin."""
