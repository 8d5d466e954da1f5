"""
NEAT Run Package

This package holds the run-wide configuration of the NEAT engine.

Modules:
    config: Configuration management for NEAT parameters

Exported Classes:
    Config: Configuration parameters for the NEAT engine
"""

from neatcore.run.config import Config

__all__ = ['Config']
