"""Built-in vendor defaults for common Dutch merchants.

Each entry maps merchant keywords to a ledger account code of the default
chart. A keyword matches as whole word(s) in the cleaned description.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from bookit.utils.description_cleaner import contains_word


@dataclass(frozen=True)
class VendorDefault:
    """Merchant keywords and the account they are booked on."""

    keywords: tuple[str, ...]
    account_code: str
    description: str


VENDOR_DEFAULTS = (
    VendorDefault(
        keywords=(
            "shell",
            "bp",
            "esso",
            "texaco",
            "tango",
            "tinq",
            "fastned",
            "tesla supercharger",
            "avia",
            "lukoil",
        ),
        account_code="4400",
        description="Fuel",
    ),
    VendorDefault(
        keywords=("parkmobile", "yellowbrick", "q-park", "parkeren", "parking"),
        account_code="4400",
        description="Parking",
    ),
    VendorDefault(
        keywords=("ns groep", "connexxion", "schiphol", "klm", "transavia", "ryanair", "easyjet"),
        account_code="4400",
        description="Business travel",
    ),
    VendorDefault(
        keywords=(
            "albert heijn",
            "ah to go",
            "jumbo",
            "lidl",
            "aldi",
            "plus supermarkt",
            "picnic",
            "sligro",
            "makro",
            "hanos",
            "dekamarkt",
            "vomar",
            "hoogvliet",
        ),
        account_code="4300",
        description="Canteen supplies",
    ),
    VendorDefault(
        keywords=(
            "hema",
            "blokker",
            "bruna",
            "primera",
            "the read shop",
            "123inkt",
            "viking",
            "staples",
            "office centre",
        ),
        account_code="4300",
        description="Office supplies",
    ),
    VendorDefault(
        keywords=("google ads",),
        account_code="4500",
        description="Online advertising",
    ),
    VendorDefault(
        keywords=("kpn", "ziggo", "vodafone", "t-mobile", "odido"),
        account_code="4600",
        description="Telephone and internet",
    ),
    VendorDefault(
        keywords=("rabobank", "ing bank", "abn amro", "knab", "bunq", "transactiekosten"),
        account_code="4700",
        description="Bank charges",
    ),
    VendorDefault(
        keywords=(
            "google workspace",
            "google cloud",
            "microsoft 365",
            "microsoft azure",
            "apple.com/bill",
            "adobe",
            "dropbox",
            "zoom",
            "slack",
            "moneybird",
            "twinfield",
        ),
        account_code="4800",
        description="Software subscriptions",
    ),
)


def match_vendor(
    text: str, vendors: Iterable[VendorDefault] = VENDOR_DEFAULTS
) -> Optional[tuple[VendorDefault, str]]:
    """Return the first vendor with a keyword in the text, and that keyword."""
    if not text:
        return None
    for vendor in vendors:
        for keyword in vendor.keywords:
            if contains_word(text, keyword):
                return vendor, keyword
    return None
