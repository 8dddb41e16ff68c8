"""
Parse rendered files with python-hcl2 to catch malformed output early.
"""
from typing import Dict, Optional

import hcl2


def check_text(text: str) -> Optional[str]:
    """Return the parser error for ``text``, or None if it parses."""
    if not text.strip():
        return None
    try:
        hcl2.loads(text)
    except Exception as exc:
        return str(exc).strip() or exc.__class__.__name__
    return None


def check_files(files: Dict[str, str]) -> Dict[str, str]:
    """Map of filename → parse error, for the files that fail to parse."""
    errors = {}
    for filename, text in files.items():
        error = check_text(text)
        if error:
            errors[filename] = error
    return errors
