"""
CLI module for Product Scout.

Provides command-line interface using Typer:
- discover: Find product URLs for storefronts
- config: Configuration management
"""

from product_scout.cli.main import app

__all__ = ["app"]
