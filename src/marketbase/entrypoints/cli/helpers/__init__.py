"""CLI helpers for MARKETBASE.

Utilities used by the command-line interface: URL sanitization for safe display,
message emitters that write to stderr with emoji→ASCII fallbacks, and the
container factory that turns configuration errors into Click errors.
"""

from .app import cli_errors, load_container
from .db_url import sanitize_url
from .messages import error, success, warn

__all__ = ["cli_errors", "error", "load_container", "sanitize_url", "success", "warn"]
