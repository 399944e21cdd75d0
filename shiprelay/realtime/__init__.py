"""
Real-time relay core: connections, rooms, routing and liveness.
"""
