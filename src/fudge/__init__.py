"""
Fudge - Fudgefile driven package management

Fudge reads a declarative Fudgefile listing the packages a project needs and
delegates install, upgrade, uninstall, pack, list and search operations to
Chocolatey.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
