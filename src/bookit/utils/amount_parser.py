"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles both decimal separators used on bank statements:
    - "123.45", "-123.45", "1,234.56"
    - "123,45", "-1.234,56" (comma as decimal separator)
    - "€ 123,45", "-€123.45"
    - "(123.45)" (negative in parentheses)

    When both "." and "," occur, the last one is the decimal separator. A
    single "," followed by one or two digits is a decimal separator too.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount, quantized to cents

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    text = re.sub(r"[$€£\s]", "", text)
    if text.startswith("-"):
        is_negative = not is_negative
        text = text[1:]
    elif text.startswith("+"):
        text = text[1:]

    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        if re.search(r",\d{1,2}$", text) and text.count(",") == 1:
            text = text.replace(",", ".")
        else:
            text = text.replace(",", "")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")

    amount = amount.quantize(Decimal("0.01"))
    return -amount if is_negative else amount
