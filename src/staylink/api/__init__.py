"""HTTP and WebSocket surfaces."""
