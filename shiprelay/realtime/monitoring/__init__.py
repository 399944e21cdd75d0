"""
Monitoring components for connection management.
"""

from .liveness_monitor import LivenessMonitor

__all__ = ["LivenessMonitor"]
