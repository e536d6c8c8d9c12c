"""
Mission control (ground station) package.

This service is responsible for:
- Keeping a WebSocket connection to the rover alive (keepalive, reconnect).
- Rebuilding a map of the explored planet from rover messages only.
- Letting an operator send command sequences from a console.
"""
