"""PostgreSQL database plugin."""
