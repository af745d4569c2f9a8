"""
Registry for component drivers.

This module provides a registry for component drivers to register themselves
and a decorator for registering driver classes.
"""

from typing import Any, Dict, Optional, Type

from installer.base_component import BaseComponent


class InstallerRegistry:
    """
    Registry for component drivers.

    Maps component names to driver classes. The auxiliary tools share one
    driver class registered under each tool name.
    """

    _registry: Dict[str, Type[BaseComponent]] = {}

    @classmethod
    def register(cls, name: str, metadata: Optional[Dict[str, Any]] = None):
        """
        Decorator for registering driver classes.

        Args:
            name: The name of the component.
            metadata: Optional metadata for the driver, such as its
                      dependencies and description.

        Returns:
            A decorator function that registers the driver class.
        """

        def decorator(
            installer_class: Type[BaseComponent],
        ) -> Type[BaseComponent]:
            if name in cls._registry:
                raise ValueError(
                    f"Installer with name '{name}' already registered"
                )

            # Store metadata in the class if provided
            if metadata:
                installer_class.metadata = metadata
            if not installer_class.name:
                installer_class.name = name

            cls._registry[name] = installer_class
            return installer_class

        return decorator

    @classmethod
    def register_class(cls, name: str, installer_class: Type[BaseComponent]) -> None:
        """Register an already defined class under an additional name."""
        if name in cls._registry:
            raise ValueError(f"Installer with name '{name}' already registered")
        cls._registry[name] = installer_class

    @classmethod
    def get_installer(cls, name: str) -> Type[BaseComponent]:
        """
        Get a driver class by name.

        Raises:
            KeyError: If no driver with the given name is registered.
        """
        if name not in cls._registry:
            raise KeyError(f"No installer registered with name '{name}'")

        return cls._registry[name]

    @classmethod
    def get_all_installers(cls) -> Dict[str, Type[BaseComponent]]:
        """
        Get all registered drivers.

        Returns:
            A dictionary mapping component names to driver classes.
        """
        return cls._registry.copy()
