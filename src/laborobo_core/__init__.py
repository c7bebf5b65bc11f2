"""Laborobo core: RACI-aware work management, My Work views and agent tools."""

__version__ = "1.0.0"
