"""Password policy enforcement.

Follows NIST SP 800-63B: a length floor, a common-password blocklist and a
check against the user's own name/email instead of composition rules.
"""

import re
from typing import List, Optional

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128

# Common passwords to reject
COMMON_PASSWORDS = {
    "password", "123456", "12345678", "123456789", "qwerty", "abc123",
    "monkey", "1234567", "letmein", "trustno1", "dragon", "baseball",
    "iloveyou", "master", "sunshine", "shadow", "123123", "654321",
    "superman", "qazwsx", "football", "password1", "password123",
    "welcome", "welcome1", "admin", "admin123", "changeme", "1qaz2wsx",
    "qwertyuiop", "1234567890", "passw0rd", "p@ssw0rd", "iloveyou1",
    "crewbook", "crewbook123",
}

# Patterns that indicate weak passwords
WEAK_PATTERNS = [
    r"^(.)\1+$",  # All same character (aaaaaaaa)
    r"^(012|123|234|345|456|567|678|789|890)+$",  # Sequential numbers
    r"^(qwerty|asdf|zxcv)+",  # Keyboard patterns
]


class PasswordValidationError(Exception):
    """Raised when a password doesn't meet policy."""

    def __init__(self, message: str, errors: List[str]):
        self.message = message
        self.errors = errors
        super().__init__(message)


def validate_password(password: str, user_context: Optional[List[str]] = None) -> List[str]:
    """Validate password against policy.

    Args:
        password: Password to validate
        user_context: Strings the password must not contain (name, email local part)

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if len(password) > MAX_PASSWORD_LENGTH:
        errors.append(f"Password must be at most {MAX_PASSWORD_LENGTH} characters long")

    password_lower = password.lower()
    if password_lower in COMMON_PASSWORDS:
        errors.append("This password is too common. Please choose a more unique password")

    for pattern in WEAK_PATTERNS:
        if re.match(pattern, password_lower):
            errors.append("Password contains a weak pattern (repeated or sequential characters)")
            break

    if user_context:
        for context in user_context:
            if context and len(context) >= 3 and context.lower() in password_lower:
                errors.append("Password cannot contain your name or email")
                break

    return errors


def check_password_strength(password: str, user_context: Optional[List[str]] = None) -> None:
    """Check password strength and raise if weak.

    Raises:
        PasswordValidationError: If the password violates the policy
    """
    errors = validate_password(password, user_context)
    if errors:
        raise PasswordValidationError("Password does not meet security requirements", errors)
