"""Chat content policy.

Outbound chat text is rejected when it looks like it carries a phone number
or an email address, so that contact details are not exchanged outside the
platform. Matching is pattern based and best effort.
"""

import re
from dataclasses import dataclass

from yafoy.core.config import settings

PHONE_PATTERNS = [
    # International format: +225 07 00 00 00 00, +33.6.12.34.56.78
    re.compile(r"\+\d{1,4}(?:[\s.-]?\d{1,4}){3,6}"),
    # Ivorian numbers: 0x xx xx xx xx
    re.compile(r"\b0[1-9][\s.-]?\d{2}[\s.-]?\d{2}[\s.-]?\d{2}[\s.-]?\d{2}\b"),
    # 8+ consecutive digits
    re.compile(r"\b\d{8,14}\b"),
    # xx-xx-xx-xx-xx
    re.compile(r"\b\d{2}[\s.-]\d{2}[\s.-]\d{2}[\s.-]\d{2}[\s.-]\d{2}\b"),
    # Compact format without spaces
    re.compile(r"\b\d{10}\b"),
]

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

PHONE_PLACEHOLDER = "[numéro masqué]"
EMAIL_PLACEHOLDER = "[email masqué]"

EMPTY_MESSAGE = "Le message ne peut pas être vide"
CONTACT_SHARING_MESSAGE = (
    "Le partage de coordonnées (numéros de téléphone, adresses email) n'est pas "
    "autorisé dans le chat. Utilisez la messagerie sécurisée de la plateforme."
)


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    message: str | None = None
    sanitized: str | None = None


def contains_phone_number(text: str) -> bool:
    return any(pattern.search(text) for pattern in PHONE_PATTERNS)


def contains_email(text: str) -> bool:
    return EMAIL_PATTERN.search(text) is not None


def validate_chat_message(content: str | None, max_length: int | None = None) -> ValidationResult:
    """Validate outbound chat text.

    Rejects empty text, text longer than ``max_length`` and text carrying a
    phone number or an email address. Rejected text must not be sent.
    """
    if max_length is None:
        max_length = settings.CHAT_MESSAGE_MAX_LENGTH

    if not content or not content.strip():
        return ValidationResult(is_valid=False, message=EMPTY_MESSAGE)

    if len(content) > max_length:
        return ValidationResult(
            is_valid=False,
            message=f"Le message est trop long (max {max_length} caractères)",
        )

    if contains_email(content) or contains_phone_number(content):
        return ValidationResult(is_valid=False, message=CONTACT_SHARING_MESSAGE)

    return ValidationResult(is_valid=True, sanitized=content)


def sanitize_message(content: str) -> str:
    """Mask every email and phone-like substring, keeping the rest intact."""
    # Emails first: their local part may contain digit runs
    sanitized = EMAIL_PATTERN.sub(EMAIL_PLACEHOLDER, content)
    for pattern in PHONE_PATTERNS:
        sanitized = pattern.sub(PHONE_PLACEHOLDER, sanitized)
    return sanitized
