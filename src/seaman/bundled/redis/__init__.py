"""Redis cache plugin."""
