"""
Email masking utilities for privacy protection.

When an email is in the config mappings, the original email is returned with
the mapped display name. When it is not, the email is masked as
"j***@example.com" and the calendar API's display name (if any) is kept.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from domain.models import MaskedEmailResult
from services.privacy_config import validate_config

logger = logging.getLogger(__name__)

MASK = '***'
PRIMARY_CALENDAR_ID = 'primary'


def mask_email(email: Optional[str]) -> str:
    """
    Mask an email address for privacy.

    Args:
        email: Email address to mask

    Returns:
        str: Masked email, the input unchanged if it has no "@",
        or "" for empty input

    Example:
        >>> mask_email("john.doe@example.com")
        'j***@example.com'
        >>> mask_email("@example.com")
        '***@example.com'
    """
    if not email or '@' not in email:
        return email or ''

    local_part, _, domain = email.partition('@')

    if not local_part:
        return f"{MASK}@{domain}"

    return f"{local_part[0]}{MASK}@{domain}"


def _get_mappings(config: Any) -> Mapping[str, str]:
    if config is None:
        return {}
    if isinstance(config, Mapping):
        # Config file shape; normalized the same way the loader does
        return validate_config(dict(config)).email_mappings
    mappings = getattr(config, 'email_mappings', None)
    return mappings or {}


def apply_email_privacy(
    email: Optional[str],
    external_display_name: Optional[str],
    config: Any
) -> MaskedEmailResult:
    """
    Apply privacy rules to an email address.

    Known contact (email in config.email_mappings, case-insensitive):
        original email with the mapped display name. The mapped name wins
        over any name supplied by the calendar API.

    Unknown email:
        masked email, keeping the calendar API's display name if present.

    Args:
        email: Email address to process
        external_display_name: Display name from the calendar API
        config: PrivacyConfig (or a dict with "emailMappings")

    Returns:
        MaskedEmailResult with the email and display name to render
    """
    if not email:
        return MaskedEmailResult(email='', display_name=external_display_name or None)

    mappings = _get_mappings(config)
    email_lower = email.lower()

    if email_lower in mappings:
        return MaskedEmailResult(email=email, display_name=mappings[email_lower])

    return MaskedEmailResult(
        email=mask_email(email),
        display_name=external_display_name or None
    )


def apply_privacy_to_attendees(
    attendees: Optional[Iterable[Dict[str, Any]]],
    config: Any
) -> List[Dict[str, Any]]:
    """
    Apply privacy rules to a list of calendar attendees.

    Each attendee is a dict as returned by the calendar API (email,
    displayName, responseStatus, ...). Fields other than email and
    displayName are preserved. The input is not modified.

    Args:
        attendees: Attendee dicts (None is treated as empty)
        config: PrivacyConfig with email mappings

    Returns:
        List of new attendee dicts
    """
    result = []
    for attendee in attendees or []:
        masked = apply_email_privacy(
            attendee.get('email'),
            attendee.get('displayName'),
            config
        )
        updated = dict(attendee)
        updated['email'] = masked.email
        if masked.display_name:
            updated['displayName'] = masked.display_name
        else:
            updated.pop('displayName', None)
        result.append(updated)

    logger.debug(f"Applied email privacy to {len(result)} attendee(s)")
    return result


def resolve_calendar_id(calendar_id: Optional[str], config: Any) -> str:
    """
    Substitute the configured default calendar for "primary".

    Args:
        calendar_id: Calendar ID requested by the caller
        config: PrivacyConfig with an optional default_calendar_id

    Returns:
        str: The configured default calendar when calendar_id is "primary"
        (or empty) and a default is set, otherwise calendar_id unchanged
    """
    default_id = getattr(config, 'default_calendar_id', None) if config is not None else None

    if (not calendar_id or calendar_id == PRIMARY_CALENDAR_ID) and default_id:
        return default_id

    return calendar_id or PRIMARY_CALENDAR_ID
