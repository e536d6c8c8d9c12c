"""
Rover vehicle service package.

This service is responsible for:
- Owning the authoritative rover state (position, heading, battery).
- Executing movement command sequences on a toroidal planet.
- Serving the mission control protocol over a WebSocket.

The HTTP/WebSocket server is implemented with Tornado.
"""
