"""
Routes Package
Contains all Flask route definitions.
"""

from .scheduling import scheduling_bp

__all__ = ['scheduling_bp']
