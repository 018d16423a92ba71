"""Plugins shipped with seaman, one directory per plugin."""
