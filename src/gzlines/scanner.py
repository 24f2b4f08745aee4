"""
Directory scanning for gzip-compressed line files.
"""

import fnmatch
import os
from typing import Iterable, List, Optional, Union

from gzlines.config import config


def all_gz_in_dir(directory: Union[str, os.PathLike],
                  patterns: Optional[Iterable[str]] = None) -> List[str]:
    """
    Return the paths of all gzip files in a directory.
    
    Each pattern is matched on its own and the results concatenated, so a
    file matching two patterns (``a.jl.gz`` for ``*.gz`` and ``*.jl.gz``)
    is listed twice. ``*`` matches a leading dot, so ``.part.gz`` is found
    by ``*.gz``. Patterns match names directly inside ``directory`` only;
    a pattern containing a path separator is rejected.
    
    Args:
        directory: Directory to search; a missing directory gives no matches
        patterns: Glob patterns, defaults to ``config.glob_patterns``
        
    Returns:
        Matching paths, in pattern order, sorted within each pattern
        
    Raises:
        ValueError: If a pattern is malformed
    """
    if patterns is None:
        patterns = config.glob_patterns
    patterns = list(patterns)
    for pattern in patterns:
        _check_pattern(pattern)
    
    directory = os.fspath(directory)
    try:
        names = sorted(os.listdir(directory))
    except OSError:
        names = []
    
    all_files: List[str] = []
    for pattern in patterns:
        all_files.extend(
            os.path.join(directory, name) for name in names
            if fnmatch.fnmatchcase(name, pattern)
        )
    return all_files


def _check_pattern(pattern: str) -> None:
    if not pattern:
        raise ValueError("empty glob pattern")
    if os.sep in pattern or (os.altsep and os.altsep in pattern):
        raise ValueError(f"glob pattern {pattern!r} must not contain a path separator")
    # fnmatch rules: "!" negates, a "]" right after the opening (or "!") is literal
    start = pattern.find("[")
    while start != -1:
        end = start + 1
        if end < len(pattern) and pattern[end] == "!":
            end += 1
        if end < len(pattern) and pattern[end] == "]":
            end += 1
        end = pattern.find("]", end)
        if end == -1:
            raise ValueError(f"glob pattern {pattern!r} has an unterminated character class")
        start = pattern.find("[", end + 1)
