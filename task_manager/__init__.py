"""Personal task tracking API and client."""
