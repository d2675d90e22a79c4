"""
Email privacy services.

This package contains the email masker and the cached privacy config loader
used when rendering calendar contacts and attendees.
"""

__all__ = ['email_masker', 'privacy_config']
