"""
Consolidated Utilities

Central location for helpers shared by the pipeline stages.

Sections:
- Logging and timing utilities
- String helpers for metadata values and file names
- Configuration helpers
"""

import functools
import logging
import re
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

# =============================================================================
# Logging and Timing Utilities
# =============================================================================

def setup_logging(
    verbose: bool,
    job_name: Optional[str] = None,
    enable_file_logging: bool = False
) -> None:
    """
    Configure logging with optional timestamped file output.

    Args:
        verbose: Enable debug-level logging if True
        job_name: Job name for log file naming
        enable_file_logging: Create timestamped log files when True
    """
    import sys
    from datetime import datetime

    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]

    if enable_file_logging and job_name:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = logs_dir / f"{clean_filename(job_name)}_export_{timestamp}.log"

        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
        print(f"Logging to: {log_file}")

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=handlers,
        force=True
    )


def timer(func: Callable) -> Callable:
    """Decorator to time function execution."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        end_time = time.time()
        logging.info(f"{func.__name__} completed in {end_time - start_time:.2f} seconds")
        return result
    return wrapper


# =============================================================================
# String Helpers
# =============================================================================

_WHITESPACE = re.compile(r"\s+")


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty and whitespace-only strings."""
    return value is None or not value.strip()


def is_null_like(value: Optional[str]) -> bool:
    """True for blank values and the literal string 'null' (any case)."""
    return is_blank(value) or value.lower() == "null"


def is_numeric(value: Optional[str]) -> bool:
    """True for non-empty strings made of decimal digits only."""
    return bool(value) and value.isdecimal()


def normalize_whitespace(value: str) -> str:
    """Collapse every run of whitespace into a single space."""
    return _WHITESPACE.sub(" ", value)


def final_segment(path: str) -> str:
    """Last path segment of a slash- or backslash-separated path."""
    return re.split(r"[\\/]", path.rstrip("/\\"))[-1]


def base_name(filename: str) -> str:
    """File name without its last extension."""
    dot_index = filename.rfind(".")
    return filename[:dot_index] if dot_index > 0 else filename


def extension(filename: str) -> str:
    """Last extension of a file name, without the dot."""
    dot_index = filename.rfind(".")
    return filename[dot_index + 1:] if dot_index > 0 else ""


def clean_filename(filename: str) -> str:
    """
    Clean filename for cross-platform compatibility.

    Args:
        filename: Original filename

    Returns:
        Cleaned filename safe for all platforms
    """
    # Replace problematic characters
    cleaned = re.sub(r'[<>:"/\\|?*]', '_', filename)
    # Remove multiple underscores
    cleaned = re.sub(r'_+', '_', cleaned)
    # Trim underscores from ends
    return cleaned.strip('_')


# =============================================================================
# Configuration Helpers
# =============================================================================

def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """
    Load YAML configuration file with error handling.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed YAML content as dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file is not valid YAML
    """
    import yaml

    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    try:
        with open(file_path, encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {file_path}: {e}") from e
