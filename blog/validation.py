"""
Input validation utilities.

Centralized validation logic with clear error messages.
Philosophy: Simple, clear, and reusable validation functions.
"""

from typing import Any, Iterable, Optional
import re

# Canonical decimal integers only: no sign on zero, no leading zeros,
# no underscores or surrounding whitespace
INTEGER_PATTERN = re.compile(r'0|-?[1-9][0-9]*')


class ValidationResult:
    """Result of a validation check"""

    def __init__(self, is_valid: bool, error: Optional[str] = None, value: Any = None):
        self.is_valid = is_valid
        self.error = error
        self.value = value

    def __bool__(self):
        return self.is_valid


def validate_integer(
    value: Any,
    field_name: str,
    min_value: Optional[int] = None
) -> ValidationResult:
    """
    Validate that value is an integer.

    Strings must be written the one canonical way ("10", not "010", "+10"
    or "1_0") so that each number has a single spelling in URLs.

    Args:
        value: int or decimal string
        field_name: Field name for error messages
        min_value: Minimum allowed value (inclusive)

    Returns:
        ValidationResult with the parsed int as value
    """
    if isinstance(value, bool):
        return ValidationResult(False, f"{field_name} must be an integer")

    if isinstance(value, int):
        num = value
    elif isinstance(value, str) and INTEGER_PATTERN.fullmatch(value):
        num = int(value)
    else:
        return ValidationResult(False, f"{field_name} must be an integer")

    if min_value is not None and num < min_value:
        return ValidationResult(
            False,
            f"{field_name} must be at least {min_value}"
        )

    return ValidationResult(True, value=num)


def validate_string(
    value: Any,
    field_name: str,
    max_length: Optional[int] = None
) -> ValidationResult:
    """
    Validate a required string value.

    Args:
        value: Value to validate
        field_name: Field name for error messages
        max_length: Maximum string length

    Returns:
        ValidationResult
    """
    if not value:
        return ValidationResult(False, f"{field_name} is required")

    str_value = str(value)

    if max_length is not None and len(str_value) > max_length:
        return ValidationResult(
            False,
            f"{field_name} must be at most {max_length} characters"
        )

    return ValidationResult(True, value=str_value)


# Composite validators for common use cases

def validate_page_number(value: Any) -> ValidationResult:
    """Validate a listing page number (0 is the newest page)"""
    return validate_integer(value, "Page number", min_value=0)


def validate_image_filename(filename: str, allowed_extensions: Iterable[str]) -> ValidationResult:
    """Validate an uploaded image name against the extension whitelist"""
    result = validate_string(filename, "File name", max_length=255)
    if not result:
        return result

    if '.' not in filename:
        return ValidationResult(False, "File name has no extension")

    extension = filename.rsplit('.', 1)[1].lower()
    allowed = {ext.lower() for ext in allowed_extensions}
    if extension not in allowed:
        return ValidationResult(
            False,
            f"File extension must be one of: {', '.join(sorted(allowed))}"
        )

    return ValidationResult(True, value=filename)
