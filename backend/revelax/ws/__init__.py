"""WebSocket protocol, broadcast, heartbeat and routes."""
