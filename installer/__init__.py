"""
Setup components for the Jitsi Meet stack.

Each component implements one stage of the run on top of
installer.base_component.BaseComponent.
"""

from installer.base_component import BaseComponent
from installer.context import RunContext, Secrets, generate_secrets

__all__ = ["BaseComponent", "RunContext", "Secrets", "generate_secrets"]
