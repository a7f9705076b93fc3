"""HTTP API for the collateral service."""
from .app import create_app, run_server

__all__ = ["create_app", "run_server"]
