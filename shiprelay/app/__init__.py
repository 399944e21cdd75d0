"""
Application assembly for the ShipRelay server.
"""
