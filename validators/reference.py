import re

REFERENCE_PATTERN = re.compile(r"^[0-9]{6}$")
TICKET_NUMBER_PATTERN = re.compile(r"^[0-9]{4}$")


def normalize_reference(code: str) -> str:
    return code.strip()


def is_valid_reference(code: object) -> bool:
    if not isinstance(code, str):
        return False
    return REFERENCE_PATTERN.fullmatch(normalize_reference(code)) is not None


def is_valid_ticket_number(number: object) -> bool:
    if not isinstance(number, str):
        return False
    return TICKET_NUMBER_PATTERN.fullmatch(number) is not None
