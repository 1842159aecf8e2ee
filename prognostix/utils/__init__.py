"""Utility functions and helpers for Prognostix.

This module provides common utilities including type definitions,
error classes and decorators used across the Prognostix package.

Submodules:
    - typing: Type definitions and aliases
    - errors: Exception and warning taxonomy
    - decorators: Input validation decorators

"""
