import re


def to_e164(phone):
    """
    Normalize a phone number to E.164.

    10 digits are treated as a US number and get a +1 prefix, 11 digits
    starting with 1 get a +; anything else keeps its digits behind a +.

    Args:
        phone: Phone number in any common format, e.g. "555-123-4567"

    Returns:
        str: E.164 number, e.g. "+15551234567"
    """
    digits = re.sub(r'\D', '', phone or '')
    if len(digits) == 10:
        return f'+1{digits}'
    if len(digits) == 11 and digits.startswith('1'):
        return f'+{digits}'
    return f'+{digits}'
