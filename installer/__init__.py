"""
Component drivers and the pipeline that runs them.

This package provides the driver base class, the registry drivers register
themselves in, and the orchestrator that runs them in dependency order.
"""

from installer.base_component import BaseComponent
from installer.registry import InstallerRegistry

__all__ = ["BaseComponent", "InstallerRegistry"]
