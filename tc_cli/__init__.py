"""
TC CLI - Three-layer client for the Teamcenter JSON REST services.

Layers:
- core: Transport, envelopes, session manager and typed responses
- sdk: High-level TCClient returning typed results
- cli: Opinionated command-line interface
"""

from tc_cli.sdk import TCClient

__version__ = "0.1.0"
__all__ = ["TCClient"]
