"""Coordinator responder."""

from .main import create_coordinator_agent

__all__ = ['create_coordinator_agent']
