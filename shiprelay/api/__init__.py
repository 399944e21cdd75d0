"""
HTTP and WebSocket routes for the ShipRelay server.
"""
