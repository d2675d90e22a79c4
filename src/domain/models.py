"""
Data models for the email privacy domain.

These type-safe data structures define clear contracts between the config
loader, the masker, and the calendar code that renders their output.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any

SOURCE_FILE = 'file'
SOURCE_DEFAULT = 'default'


@dataclass
class PrivacyConfig:
    """
    Privacy configuration loaded from the user's config file.

    Attributes:
        version: Schema version for future migrations
        email_mappings: Lowercase email address -> display name. Emails not
            in this map are masked as "j***@example.com"
        default_calendar_id: Calendar ID to use when "primary" is requested
            (None means "primary" passes through unchanged)
    """
    version: Optional[int] = 1
    email_mappings: Dict[str, str] = field(default_factory=dict)
    default_calendar_id: Optional[str] = None

    def is_known_contact(self, email: Optional[str]) -> bool:
        """Check if email is a known contact (case-insensitive)."""
        if not email:
            return False
        return email.lower() in (self.email_mappings or {})

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the on-disk JSON shape.

        Returns:
            Dict with version, emailMappings and defaultCalendarId
        """
        result = {
            'version': self.version,
            'emailMappings': dict(self.email_mappings),
        }
        if self.default_calendar_id:
            result['defaultCalendarId'] = self.default_calendar_id
        return result


def default_privacy_config() -> PrivacyConfig:
    """Return a fresh copy of the default (empty) privacy config."""
    return PrivacyConfig(version=1, email_mappings={}, default_calendar_id=None)


@dataclass
class MaskedEmailResult:
    """
    Email address and display name after privacy rules are applied.

    Attributes:
        email: Original email for known contacts, masked email otherwise
        display_name: Mapped name for known contacts, otherwise the
            display name supplied by the calendar API (if any)
    """
    email: str
    display_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {'email': self.email}
        if self.display_name:
            result['displayName'] = self.display_name
        return result


@dataclass
class ConfigLoadResult:
    """
    Result of a single privacy config load.

    Loading never raises: a missing or broken file yields the default
    config, and this result says which happened.

    Attributes:
        config: The loaded (or default) config, always fully populated
        source: SOURCE_FILE if parsed from disk, SOURCE_DEFAULT otherwise
        path: Config file path that was read
        error_message: Description of the failure when defaults were used
            because of an unexpected error (None for a missing file)
    """
    config: PrivacyConfig
    source: str
    path: str
    error_message: Optional[str] = None

    @property
    def used_defaults(self) -> bool:
        return self.source == SOURCE_DEFAULT

    @property
    def is_error(self) -> bool:
        """True when defaults were used because the file could not be read or parsed."""
        return self.error_message is not None

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.is_error:
            return f"ConfigLoadResult(source={self.source}, path={self.path}, error={self.error_message})"
        return f"ConfigLoadResult(source={self.source}, path={self.path})"
