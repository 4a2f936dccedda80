"""Configuration for the tolerant SAX parser.

``ParserConfig`` is an immutable value object: one instance may be shared by
any number of parsers on any number of threads.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

# Attributes kept per start tag. A fixed bound is a safety feature against
# hostile markup, so configurations may lower it but never raise it.
MAX_ATTRIBUTES = 100

DECODE_ERROR_POLICIES = (
    "strict",
    "replace",
    "ignore",
    "surrogateescape",
    "backslashreplace",
)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError, ValueError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Settings shared by the tokenizer, attribute scanner and decoder.

    Attributes:
        max_attributes: Attributes kept per start tag (1..MAX_ATTRIBUTES)
        decode_errors: Codec error policy used when delivering UTF-8 bytes as ``str``
        correlation_id: Correlation ID attached to every log record
        log_truncations: Log a DEBUG record when an unterminated construct ends a parse
    """

    max_attributes: int = MAX_ATTRIBUTES
    decode_errors: str = "replace"
    correlation_id: Optional[str] = None
    log_truncations: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if isinstance(self.max_attributes, bool) or not isinstance(self.max_attributes, int):
            raise ConfigValidationError(
                "max_attributes must be an integer", field_name="max_attributes"
            )
        if not 1 <= self.max_attributes <= MAX_ATTRIBUTES:
            raise ConfigValidationError(
                f"max_attributes must be between 1 and {MAX_ATTRIBUTES}",
                field_name="max_attributes",
                suggestions=[f"Use a value <= {MAX_ATTRIBUTES}"],
            )
        if self.decode_errors not in DECODE_ERROR_POLICIES:
            raise ConfigValidationError(
                f"decode_errors must be one of {DECODE_ERROR_POLICIES}",
                field_name="decode_errors",
                suggestions=list(DECODE_ERROR_POLICIES),
            )
        if self.correlation_id is not None and not isinstance(self.correlation_id, str):
            raise ConfigValidationError(
                "correlation_id must be a string or None", field_name="correlation_id"
            )
        if not isinstance(self.log_truncations, bool):
            raise ConfigValidationError(
                "log_truncations must be a boolean",
                field_name="log_truncations",
                suggestions=["Use true or false"],
            )

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Example:
            >>> ParserConfig().override(max_attributes=10).max_attributes
            10
        """
        try:
            return replace(self, **kwargs)
        except TypeError as e:
            raise ConfigValidationError(f"Unknown configuration field: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Raises:
            ConfigValidationError: On unknown keys or invalid values
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be a JSON object")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(known),
            )
        return cls(**data)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "ParserConfig":
        """Load configuration from a JSON file."""
        return cls.from_json(Path(path).read_text(encoding="utf-8"))

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Lenient decoding with the full attribute bound."""
        return cls()

    @classmethod
    def strict_decoding(cls) -> "ParserConfig":
        """Raise ``UnicodeDecodeError`` instead of replacing invalid UTF-8."""
        return cls(decode_errors="strict")
