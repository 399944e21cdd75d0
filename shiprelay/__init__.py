"""
ShipRelay: a WebSocket relay that pairs a spaceship game host with one client.
"""

__version__ = "0.1.0"
