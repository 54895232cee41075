"""ParkSync: durable offline action queue for the parking client."""

__version__ = "1.0.0"
