# app/utils/validators.py

import re

TIME_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$')
NOTES_CLEANUP_PATTERN = re.compile(r'[^\w\s\.,:;!?¿¡()\-/]')

ROLE_SECRETARY = "SECRETARY"
ROLE_ADMIN = "ADMIN"
STAFF_ROLES = {ROLE_SECRETARY, ROLE_ADMIN}


def validate_time_format(time_str: str) -> bool:
    """Validate time string format (HH:MM)"""
    return bool(TIME_PATTERN.match(time_str))


def sanitize_text(text: str, max_length: int = 500) -> str:
    """Sanitize user input text"""
    cleaned = NOTES_CLEANUP_PATTERN.sub('', text)
    return cleaned[:max_length].strip()


def is_staff_role(role: str | None) -> bool:
    return bool(role) and role.upper() in STAFF_ROLES
