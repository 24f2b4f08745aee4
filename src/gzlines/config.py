"""
Configuration management for gzip line streaming.
"""

import logging
from typing import Optional, Tuple
from dataclasses import dataclass, field
import psutil

logger = logging.getLogger(__name__)

# bufio.MaxScanTokenSize
DEFAULT_MAX_SCAN_TOKEN_SIZE = 64 * 1024


@dataclass
class GzLinesConfig:
    """Global configuration for gzip line streaming."""
    
    # Line buffer; raise the factor if your files have very long lines
    line_buffer_length_factor: int = 1024
    max_scan_token_size: int = DEFAULT_MAX_SCAN_TOKEN_SIZE
    
    # Directory scanning
    glob_patterns: Tuple[str, ...] = field(default_factory=lambda: ("*.gz", "*.gzip"))
    
    # Seconds LineStream.close() waits for producer threads
    join_timeout: float = 5.0
    
    _instance: Optional['GzLinesConfig'] = None
    
    def __post_init__(self):
        """Validate tunables."""
        check_factor(self.line_buffer_length_factor)
        check_token_size(self.max_scan_token_size)
    
    @classmethod
    def get_instance(cls) -> 'GzLinesConfig':
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance
    
    @classmethod
    def set_defaults(cls, **kwargs) -> None:
        """Set default configuration values."""
        instance = cls.get_instance()
        for key, value in kwargs.items():
            if key == "line_buffer_length_factor":
                check_factor(value)
            if key == "max_scan_token_size":
                check_token_size(value)
            if key == "glob_patterns":
                value = tuple(value)
            if hasattr(instance, key):
                setattr(instance, key, value)
        
        available = instance.available_memory()
        if instance.max_line_length > available:
            logger.warning(
                "Line buffer limit %s exceeds available memory %s",
                instance.format_bytes(instance.max_line_length),
                instance.format_bytes(available),
            )
    
    @property
    def max_line_length(self) -> int:
        """Largest line, terminator included, the scanner accepts."""
        return self.max_scan_token_size * self.line_buffer_length_factor
    
    def resolve_max_line_length(self, line_buffer_length_factor: Optional[int] = None) -> int:
        """Line limit for one call, honouring a per-call factor override."""
        if line_buffer_length_factor is None:
            return self.max_line_length
        check_factor(line_buffer_length_factor)
        return self.max_scan_token_size * line_buffer_length_factor
    
    def available_memory(self) -> int:
        """Bytes of memory currently available to the process."""
        return psutil.virtual_memory().available
    
    def format_bytes(self, bytes: int) -> str:
        """Format bytes as human-readable string."""
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if bytes < 1024.0:
                return f"{bytes:.2f} {unit}"
            bytes /= 1024.0
        return f"{bytes:.2f} PB"


def check_factor(factor: int) -> None:
    _check_positive_int("line_buffer_length_factor", factor)


def check_token_size(size: int) -> None:
    _check_positive_int("max_scan_token_size", size)


def _check_positive_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


# Global configuration instance
config = GzLinesConfig.get_instance()
