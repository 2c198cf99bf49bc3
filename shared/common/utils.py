# shared/common/utils.py
"""
Common Utility Functions
"""

import re
import string


BASE36_ALPHABET = string.digits + string.ascii_uppercase


# =============================================================================
# STRING UTILITIES
# =============================================================================

def to_base36(number: int) -> str:
    """Encode a non-negative integer in upper-case base 36"""
    if number < 0:
        raise ValueError("number must be non-negative")
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return ''.join(reversed(digits))


def mask_string(text: str, visible_chars: int = 4, mask_char: str = '*') -> str:
    """Mask a string, showing only last few characters"""
    if len(text) <= visible_chars:
        return text
    return mask_char * (len(text) - visible_chars) + text[-visible_chars:]


def mask_email(email: str) -> str:
    """Mask an email address for privacy"""
    if '@' not in email:
        return email
    local, domain = email.rsplit('@', 1)
    if len(local) <= 2:
        return f"{local[0]}{'*' * (len(local) - 1)}@{domain}"
    return f"{local[0]}{'*' * (len(local) - 2)}{local[-1]}@{domain}"


def mask_phone(phone: str) -> str:
    """Mask a phone number, keeping the last four digits"""
    digits = re.sub(r'\D', '', phone or '')
    if not digits:
        return phone
    return mask_string(digits, visible_chars=4)


# =============================================================================
# DATE/TIME UTILITIES
# =============================================================================

def format_duration(minutes: int) -> str:
    """Format duration in minutes to human readable string"""
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    mins = minutes % 60
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"
