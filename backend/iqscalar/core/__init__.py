"""
Core module for application configuration and the assessment engine.
"""
from .config import settings

__all__ = ["settings"]
