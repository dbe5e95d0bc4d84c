"""CLI package for the library circulation engine"""
from .main import cli

__all__ = ['cli']
