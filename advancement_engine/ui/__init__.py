"""
User interface module for the advancement engine.
"""

from .cli_interface import AdvancementInterface

__all__ = ["AdvancementInterface"]
