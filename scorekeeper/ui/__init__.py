"""
User interface package for the league scorekeeper.

This package contains the Flask JSON API used by the scorer's browser.
"""
from .web_app import create_app, run_web_app

__all__ = ["create_app", "run_web_app"]
