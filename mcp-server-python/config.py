"""
Configuration module for the TrackMyApp MCP Server.

Provides centralized configuration management with support for:
- Environment variables
- Default values
- Path resolution
- Logging configuration
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file at project root
# config.py is in mcp-server-python/, so .env is in parent directory
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)


def _parse_bool(env_var: str, default: bool) -> bool:
    """Parse a boolean value from an environment variable."""
    value = os.getenv(env_var)
    if value is None:
        return default
    return value.lower() in ("true", "1", "t", "y", "yes")


def _parse_int(env_var: str, default: int) -> int:
    """Parse an integer from an environment variable, keeping the default on bad input."""
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(f"Ignoring non-integer {env_var}={value!r}")
        return default


class Config:
    """
    Configuration class for MCP server settings.

    Supports configuration via environment variables (and .env file) with sensible defaults.
    All paths are resolved relative to the repository root.
    """

    def __init__(self):
        """Initialize configuration from environment variables and defaults."""
        self._repo_root = self._find_repo_root()

        # Store configuration
        self.store_path = self._resolve_store_path()
        self.store_key = os.getenv("TRACKMYAPP_STORE_KEY", "trackmyapp-graph")

        # Logging configuration
        self.log_level = os.getenv("TRACKMYAPP_LOG_LEVEL", "INFO").upper()
        self.log_file = self._resolve_log_path()

        # Server configuration
        self.server_name = os.getenv("TRACKMYAPP_SERVER_NAME", "trackmyapp-mcp-server")

        # Flow graph behaviour
        self.flow_row_limit = _parse_int("TRACKMYAPP_FLOW_ROW_LIMIT", 10000)
        self.prune_orphans = _parse_bool("TRACKMYAPP_PRUNE_ORPHANS", False)

    def _find_repo_root(self) -> Path:
        """
        Find the repository root directory.

        Returns:
            Path to repository root (parent of mcp-server-python/)
        """
        return Path(__file__).resolve().parent.parent

    def _resolve_store_path(self) -> Path:
        """
        Resolve the graph store path from environment or default.

        Resolution order:
        1. TRACKMYAPP_STORE environment variable (absolute or relative)
        2. TRACKMYAPP_ROOT/data/trackmyapp.db
        3. Default: <repo_root>/data/trackmyapp.db

        Returns:
            Resolved absolute Path to the store file
        """
        store_env = os.getenv("TRACKMYAPP_STORE")
        if store_env:
            store_path = Path(store_env)
            if store_path.is_absolute():
                return store_path
            return self._repo_root / store_path

        root_env = os.getenv("TRACKMYAPP_ROOT")
        if root_env:
            return Path(root_env) / "data" / "trackmyapp.db"

        return self._repo_root / "data" / "trackmyapp.db"

    def _resolve_log_path(self) -> Optional[Path]:
        """
        Resolve the log file path from environment.

        If TRACKMYAPP_LOG_FILE is set, logs will be written to that file.
        Otherwise, logs go to stderr only.
        """
        log_env = os.getenv("TRACKMYAPP_LOG_FILE")
        if not log_env:
            return None

        log_path = Path(log_env)
        if log_path.is_absolute():
            return log_path
        return self._repo_root / log_path

    @property
    def max_flow_rows(self) -> Optional[int]:
        """Row bound for the flow traversal; None when disabled with 0 or less."""
        if self.flow_row_limit <= 0:
            return None
        return self.flow_row_limit

    def setup_logging(self):
        """
        Configure logging based on configuration settings.

        Sets up logging to stderr and optionally to a file.
        Log level is controlled by TRACKMYAPP_LOG_LEVEL.
        """
        numeric_level = getattr(logging, self.log_level, logging.INFO)

        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)

        # Remove existing handlers to avoid duplicates
        root_logger.handlers.clear()

        # stderr keeps stdout free for the stdio transport
        stderr_handler = logging.StreamHandler()
        stderr_handler.setLevel(numeric_level)
        stderr_handler.setFormatter(formatter)
        root_logger.addHandler(stderr_handler)

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            logging.info(f"Logging to file: {self.log_file}")

        logging.info(f"Log level set to: {self.log_level}")
        logging.info(f"Repository root: {self._repo_root}")
        logging.info(f"Store path: {self.store_path}")

    def validate(self) -> list[str]:
        """
        Validate configuration and return any warnings.

        Returns:
            List of warning messages (empty if all valid)
        """
        warnings = []

        if not self.store_path.exists():
            warnings.append(
                f"Store file not found: {self.store_path}. "
                "It will be created with the default graph on first write."
            )
        elif not self.store_path.is_file():
            warnings.append(f"Store path is not a file: {self.store_path}")

        if self.log_file:
            log_dir = self.log_file.parent
            if not log_dir.exists():
                try:
                    log_dir.mkdir(parents=True, exist_ok=True)
                except Exception as e:
                    warnings.append(f"Cannot create log directory {log_dir}: {e}")
            elif not os.access(log_dir, os.W_OK):
                warnings.append(f"Log directory not writable: {log_dir}")

        return warnings


# Global configuration instance
config = Config()


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Global Config instance
    """
    return config
