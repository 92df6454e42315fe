"""
NoteScope Shared Module
=======================

Configuration, logging and console helpers used across NoteScope.
"""

from shared.config import ScopeConfig, get_config

__all__ = ["ScopeConfig", "get_config"]
