"""
Import utilities for spreadsheet imports.

Provides functions for:
- Generating unique import codes (IMP-YYYYMMDD-XXXXXX)
- Computing file hashes for duplicate detection
- Formatting reportable error strings
"""

import hashlib
import random
from datetime import datetime, timezone
from typing import Union


# Characters that are unambiguous when read aloud or displayed
# Excludes: 0/O, 1/I/L, 8/B, 5/S
UNAMBIGUOUS_CHARS = "ACDEFGHJKMNPQRTUVWXYZ234679"


def generate_import_code() -> str:
    """
    Generate a human-readable import code.

    Format: IMP-YYYYMMDD-XXXXXX
    Example: IMP-20260107-A3C4D6

    Returns:
        str: Unique import code
    """
    date_part = datetime.now(timezone.utc).strftime("%Y%m%d")
    random_part = "".join(random.choices(UNAMBIGUOUS_CHARS, k=6))
    return f"IMP-{date_part}-{random_part}"


def get_file_hash(content: Union[bytes, str]) -> str:
    """
    Compute SHA-256 hash of file content.

    Args:
        content: Raw file bytes (text is hashed as UTF-8)

    Returns:
        str: Hex-encoded SHA-256 hash (64 characters)
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def format_reportable(
    import_code: str,
    status: str,
    record_kind: str,
    parsed_rows: int = 0,
    total_rows: int = 0,
    duplicates: int = 0,
    error_count: int = 0,
) -> str:
    """
    Format a copy-pasteable one-line summary of an import.

    Example output:
        IMP-20260107-A3C4D6 | SUCCESS | charges | 42/45 rows | 3 duplicate(s)
        IMP-20260107-X9Y7Z4 | FAILED | trips | 0/12 rows | 2 error(s)
    """
    parts = [import_code, status.upper(), record_kind, f"{parsed_rows}/{total_rows} rows"]

    if duplicates:
        parts.append(f"{duplicates} duplicate(s)")

    if error_count:
        parts.append(f"{error_count} error(s)")

    return " | ".join(parts)
