"""Domain models for delivery-date updates."""
