"""Bank statement description cleaning and keyword matching."""

import re

# Applied in order; each match is removed from the description.
NOISE_PATTERNS = [
    # Wallets and payment processors
    re.compile(r"\b(Apple Pay|Google Pay|Samsung Pay|Garmin Pay)\b", re.IGNORECASE),
    re.compile(r"\b(CCV|Mollie|Buckaroo|Adyen|MultiSafepay|Pay\.nl|Sisow)\b", re.IGNORECASE),
    # Card terminal noise
    re.compile(r"\b(Betaalautomaat|Betaal automaat|Pinautomaat|Pin automaat)\b", re.IGNORECASE),
    re.compile(r"\b(Contactloos|Mobiele betaling|Mobile payment|NFC)\b", re.IGNORECASE),
    re.compile(r"\b(Pasnummer|Pasnr\.?|Pas nr\.?|Kaart nr\.?|Card nr\.?)\b", re.IGNORECASE),
    # Dates and times
    re.compile(r"\b\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4}\b"),
    re.compile(r"\b\d{4}[-/.]\d{1,2}[-/.]\d{1,2}\b"),
    re.compile(r"\b\d{1,2}:\d{2}(:\d{2})?\b"),
    # Bank codes and prefixes
    re.compile(
        r"\b(BEA|SEPA|TRX|PAS|NR|REF|IBAN|BIC|TERM|PIN|ID|CODE|Omschrijving|Incasso)\b",
        re.IGNORECASE,
    ),
    # Terminal and transaction numbers
    re.compile(r"\b\d{4,}\b"),
]


def clean_description(description: str) -> str:
    """Strip payment noise from a bank statement line.

    Removes wallet and processor names, card terminal phrases, dates, times,
    bank codes and long digit runs, then collapses whitespace.

    Examples:
        >>> clean_description("BEA 12:00 24-12-2024 SHELL UTRECHT NR 12345 PAS 678")
        'SHELL UTRECHT 678'
    """
    if not description:
        return ""
    cleaned = description
    for pattern in NOISE_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return " ".join(cleaned.split())


def contains_word(text: str, keyword: str) -> bool:
    """Whether the keyword occurs in the text as whole word(s), ignoring case."""
    keyword = keyword.strip()
    if not text or not keyword:
        return False
    return re.search(rf"\b{re.escape(keyword)}\b", text, re.IGNORECASE) is not None
