"""ZeroMQ transport backend."""
