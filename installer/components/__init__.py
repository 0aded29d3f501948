"""
Component modules for the installer.

This package contains all the component modules for the installer.
Each component is a separate module that provides installation and configuration
functionality for a specific part of the system.
"""
