import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[0-9]{7,15}$")
PHONE_SEPARATORS = re.compile(r"[\s\-()]")
NATIONAL_ID_PATTERN = re.compile(r"^[0-9]{6,8}$")
# venezuelan cedula prefix, V-12345678 or E12345678
NATIONAL_ID_PREFIX = re.compile(r"^[VE]-?", re.IGNORECASE)


def is_valid_name(name: str) -> bool:
    return len(name.strip()) >= 2


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email.strip()) is not None


def is_valid_phone(phone: str) -> bool:
    cleaned = PHONE_SEPARATORS.sub("", phone)
    return PHONE_PATTERN.fullmatch(cleaned) is not None


def is_valid_national_id(national_id: str) -> bool:
    cleaned = NATIONAL_ID_PREFIX.sub("", national_id.strip())
    return NATIONAL_ID_PATTERN.fullmatch(cleaned) is not None
