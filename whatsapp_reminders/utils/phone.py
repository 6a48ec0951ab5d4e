"""Phone number formatting and WhatsApp deep links."""

import re
from typing import Optional
from urllib.parse import quote

WHATSAPP_BASE_URL = "https://wa.me/"
INDIAN_COUNTRY_CODE = "91"

# Characters left unescaped by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "!*'()"

_NON_DIGITS = re.compile(r"\D")
_INDIAN_MOBILE = re.compile(r"^[6-9]\d{9}$")
_INDIAN_MOBILE_WITH_CODE = re.compile(r"^91[6-9]\d{9}$")


def digits_only(phone_number: str) -> str:
    return _NON_DIGITS.sub("", phone_number or "")


def encode_uri_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def is_valid_indian_number(phone_number: str) -> bool:
    """10-digit mobile starting 6-9, optionally prefixed with 91."""
    cleaned = digits_only(phone_number)
    return bool(_INDIAN_MOBILE.match(cleaned) or _INDIAN_MOBILE_WITH_CODE.match(cleaned))


def is_likely_indian_number(phone_number: str) -> bool:
    cleaned = digits_only(phone_number)
    return (
        (len(cleaned) == 10 and cleaned[0] in "6789")
        or (len(cleaned) == 12 and cleaned.startswith("91"))
        or (len(cleaned) == 13 and cleaned.startswith("091"))
    )


def ensure_indian_country_code(phone_number: str) -> str:
    """Prefix 91 onto a bare 10-digit Indian mobile number."""
    cleaned = digits_only(phone_number)
    if len(cleaned) == 10 and cleaned[0] in "6789":
        return INDIAN_COUNTRY_CODE + cleaned
    return cleaned


def format_indian_number(phone_number: str) -> str:
    cleaned = digits_only(phone_number)
    if len(cleaned) == 10:
        return f"+91 {cleaned[:5]}-{cleaned[5:]}"
    if len(cleaned) == 12 and cleaned.startswith("91"):
        return f"+{cleaned[:2]} {cleaned[2:7]}-{cleaned[7:]}"
    return f"+91 {cleaned}"


def format_phone_number(phone_number: str) -> str:
    """Display format: (XXX) XXX-XXXX for 10 digits, +digits otherwise.

    Inputs with fewer than 10 digits are returned untouched.
    """
    cleaned = digits_only(phone_number)
    if len(cleaned) < 10:
        return phone_number
    if len(cleaned) == 10:
        return f"({cleaned[:3]}) {cleaned[3:6]}-{cleaned[6:]}"
    return f"+{cleaned}"


def display_phone_number(phone_number: str) -> str:
    if is_likely_indian_number(phone_number):
        return format_indian_number(phone_number)
    return format_phone_number(phone_number)


def whatsapp_link(phone_number: str, message: Optional[str] = None, add_indian_country_code: bool = True) -> str:
    """Build a wa.me deep link.

    The number is reduced to digits; a bare Indian mobile number gets the 91
    prefix when ``add_indian_country_code`` is set. The message, if any, is
    encoded the way encodeURIComponent does it.
    """
    if add_indian_country_code:
        number = ensure_indian_country_code(phone_number)
    else:
        number = digits_only(phone_number)

    url = f"{WHATSAPP_BASE_URL}{number}"
    if message:
        url += f"?text={encode_uri_component(message)}"
    return url
