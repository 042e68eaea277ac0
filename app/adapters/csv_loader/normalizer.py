"""CSV column normalization — handles BOM, trailing spaces, encoding quirks."""

from __future__ import annotations

import re

# Free-form role spellings seen in exports → canonical role value
ROLE_ALIASES: dict[str, str] = {
    "accountant": "accountant",
    "bookkeeper": "accountant",
    "corporatesecretary": "corporateSecretary",
    "corporate_secretary": "corporateSecretary",
    "secretary": "corporateSecretary",
    "director": "director",
}


def normalize_column_name(name: str) -> str:
    """Normalize a CSV column name.

    - Strips leading/trailing whitespace
    - Removes BOM characters (\\ufeff)
    - Replaces multiple spaces / non-breaking spaces with single underscore
    - Lowercases
    - Strips non-alphanumeric characters (except underscore)
    """
    # Remove BOM
    name = name.replace("\ufeff", "")
    # Strip whitespace
    name = name.strip()
    # Replace spaces, non-breaking spaces, tabs with underscore
    name = re.sub(r"[\s\u00a0]+", "_", name)
    # Lowercase
    name = name.lower()
    # Remove anything that's not alphanumeric or underscore
    name = re.sub(r"[^\w]", "", name, flags=re.UNICODE)
    return name


def clean_string(value: str | None) -> str | None:
    """Strip whitespace and return None for empty strings."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def normalize_role(raw: str | None) -> str | None:
    """Map 'Corporate Secretary', 'corporateSecretary', 'SECRETARY'... to a role value.

    Returns None for anything unrecognised.
    """
    if not raw:
        return None
    key = normalize_column_name(raw)
    return ROLE_ALIASES.get(key) or ROLE_ALIASES.get(key.replace("_", ""))
