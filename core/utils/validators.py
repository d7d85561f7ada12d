"""Validation utilities for account and profile input."""

import re
from typing import Optional
from email_validator import validate_email as _validate_email, EmailNotValidError

SPECIAL_CHARACTERS = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

# Minimum score (out of 5) for a password to be accepted on change
STRONG_PASSWORD_SCORE = 4


def validate_email(email: str) -> tuple[bool, Optional[str]]:
    """
    Validate email address format.

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, lower-cased normalized email or error_message)
    """
    try:
        validation = _validate_email(email.strip(), check_deliverability=False)
        return True, validation.normalized.lower()
    except EmailNotValidError as e:
        return False, str(e)


def validate_phone(phone: str) -> tuple[bool, Optional[str]]:
    """
    Validate phone number format (basic validation).

    Args:
        phone: Phone number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not phone or not phone.strip():
        return False, "Phone number is required"

    cleaned = re.sub(r'[\s\-\(\)\.]', '', phone)
    if not re.fullmatch(r'\+?\d+', cleaned):
        return False, "Phone number may only contain digits and separators"

    if len(cleaned.lstrip('+')) < 10:
        return False, "Phone number must be at least 10 digits"

    return True, None


def password_strength(password: str) -> tuple[int, list[str]]:
    """
    Score a password from 0 to 5.

    One point each for: at least 8 characters, an upper-case letter,
    a lower-case letter, a digit and a special character.

    Returns:
        Tuple of (score, list of unmet requirements)
    """
    checks = [
        (len(password) >= 8, "Password must be at least 8 characters long"),
        (re.search(r'[A-Z]', password) is not None,
         "Password must contain at least one uppercase letter"),
        (re.search(r'[a-z]', password) is not None,
         "Password must contain at least one lowercase letter"),
        (re.search(r'\d', password) is not None,
         "Password must contain at least one digit"),
        (SPECIAL_CHARACTERS.search(password) is not None,
         "Password must contain at least one special character"),
    ]
    score = sum(1 for passed, _ in checks if passed)
    feedback = [message for passed, message in checks if not passed]
    return score, feedback


def is_strong_password(password: str) -> bool:
    """True when the password meets at least four of the five rules."""
    score, _ = password_strength(password)
    return score >= STRONG_PASSWORD_SCORE

