"""
Field validation for booking requests.

Every validator returns a mapping of request field name to a human-readable
reason. An empty mapping means the input is acceptable.
"""

import re
from datetime import date, datetime
from typing import Dict, Iterable, Mapping, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?\d{1,16}$")
PHONE_STRIP = re.compile(r"[\s\-()]")
INVALID_DATE = "Invalid date format (expected YYYY-MM-DD)"

APPOINTMENT_FIELDS = {
    "name": "Name",
    "email": "Email",
    "phone": "Phone",
    "date": "Date",
    "timeSlot": "Time slot",
    "doctor": "Doctor",
}

CONSULTATION_FIELDS = {
    "patientName": "Patient name",
    "patientEmail": "Patient email",
    "patientPhone": "Patient phone",
    "consultationType": "Consultation type",
    "healthConcern": "Health concern",
}


class PriceConfigurationError(ValueError):
    """Raised when a consultation type cannot be priced."""


class UnknownConsultationType(PriceConfigurationError):
    pass


class PriceCeilingExceeded(PriceConfigurationError):
    pass


def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate_required(data: Mapping, fields: Mapping[str, str]) -> Dict[str, str]:
    """Report each field in ``fields`` that is missing or blank."""
    return {
        field: f"{label} is required"
        for field, label in fields.items()
        if is_blank(data.get(field))
    }


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_phone(phone: str) -> str:
    return PHONE_STRIP.sub("", phone.strip())


def is_valid_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def is_valid_phone(phone: Optional[str]) -> bool:
    """Optional leading '+', then 1-16 digits once separators are removed."""
    if not phone:
        return False
    return bool(PHONE_PATTERN.match(normalize_phone(phone)))


def parse_date(value: Optional[str]) -> Optional[date]:
    """Accept ISO dates and timestamps, including a trailing 'Z'."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def normalize_date(value: Optional[str]) -> Optional[str]:
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None


def get_consultation_price(
    consultation_type: str,
    prices: Mapping[str, int],
    max_amount: int,
) -> int:
    """
    Look up the fixed price for a consultation type.

    Raises:
        UnknownConsultationType: the type has no entry in the price table
        PriceCeilingExceeded: the configured price is above ``max_amount``
    """
    if consultation_type not in prices:
        raise UnknownConsultationType(
            f"Invalid consultation type '{consultation_type}'. "
            f"Must be one of: {', '.join(prices)}"
        )

    price = prices[consultation_type]
    if price > max_amount:
        raise PriceCeilingExceeded(
            f"Consultation price {price} exceeds the maximum allowed amount of {max_amount}"
        )
    return price


def _check_contact(errors: Dict[str, str], data: Mapping, email_field: str, phone_field: str):
    if email_field not in errors and not is_valid_email(data.get(email_field)):
        errors[email_field] = "Invalid email format"
    if phone_field not in errors and not is_valid_phone(data.get(phone_field)):
        errors[phone_field] = "Invalid phone number format"


def validate_appointment(data: Mapping) -> Dict[str, str]:
    errors = validate_required(data, APPOINTMENT_FIELDS)
    _check_contact(errors, data, "email", "phone")
    if "date" not in errors and parse_date(data.get("date")) is None:
        errors["date"] = INVALID_DATE
    return errors


def validate_consultation(
    data: Mapping,
    prices: Mapping[str, int],
    max_amount: int,
) -> Dict[str, str]:
    errors = validate_required(data, CONSULTATION_FIELDS)
    _check_contact(errors, data, "patientEmail", "patientPhone")
    if not is_blank(data.get("preferredDate")) and parse_date(data.get("preferredDate")) is None:
        errors["preferredDate"] = INVALID_DATE

    if "consultationType" in errors:
        return errors

    try:
        price = get_consultation_price(data["consultationType"].strip(), prices, max_amount)
    except UnknownConsultationType as exc:
        errors["consultationType"] = str(exc)
        return errors
    except PriceCeilingExceeded as exc:
        errors["amount"] = str(exc)
        return errors

    submitted = data.get("amount")
    if not is_blank(submitted):
        try:
            matches = float(submitted) == float(price)
        except (TypeError, ValueError):
            errors["amount"] = "Amount must be a number"
        else:
            if not matches:
                errors["amount"] = f"Amount must equal the {data['consultationType'].strip()} consultation price of {price}"

    return errors


def check_price_table(prices: Mapping[str, int], max_amount: int) -> Iterable[str]:
    """Yield a message for each configured price above the ceiling."""
    for consultation_type, price in prices.items():
        if price > max_amount:
            yield f"{consultation_type}: {price} > {max_amount}"
