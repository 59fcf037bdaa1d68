"""Runtime settings read from BOOKIT_* environment variables."""

from typing import Annotated, Literal, Mapping, Optional

import pydantic
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from bookit.domain.errors import ValidationError

ENV_PREFIX = "BOOKIT_"


class BookingSettings(BaseSettings):
    """Ledger account codes and bulk processing knobs.

    The account codes identify the fixed system accounts the booking engine
    posts against. ``cash_code_range`` is inclusive and compared numerically.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        frozen=True,
        extra="ignore",
    )

    bank_account_code: str = Field(default="1100", description="Bank ledger account code")
    debtors_account_code: str = Field(default="1300", description="Debtors control account code")
    creditors_account_code: str = Field(
        default="1600", description="Creditors control account code"
    )
    private_account_code: str = Field(default="510", description="Private withdrawals account code")
    cash_code_range: Annotated[tuple[int, int], NoDecode] = Field(
        default=(1000, 1199), description="Inclusive code range of cash accounts, e.g. 1000-1199"
    )
    confidence_threshold: int = Field(
        default=70, ge=0, le=100, description="Minimum score for automatic booking"
    )
    private_delay: float = Field(default=0.2, ge=0, description="Pause between private bookings")
    classify_delay: float = Field(default=0.3, ge=0, description="Pause between classifications")
    classifier_url: Optional[str] = Field(default=None, description="Classification service URL")
    classifier_timeout: float = Field(default=30.0, ge=0, description="HTTP timeout in seconds")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="Logging level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format"
    )

    @field_validator("cash_code_range", mode="before")
    @classmethod
    def _parse_code_range(cls, value):
        if not isinstance(value, str):
            return value
        try:
            low, high = (int(part.strip()) for part in value.split("-", 1))
        except ValueError:
            raise ValueError(f"invalid code range '{value}' (expected e.g. 1000-1199)")
        return low, high

    @field_validator("cash_code_range")
    @classmethod
    def _check_code_range(cls, value: tuple[int, int]) -> tuple[int, int]:
        low, high = value
        if low > high:
            raise ValueError(f"start {low} is after end {high}")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("log_format", mode="before")
    @classmethod
    def _lower_log_format(cls, value):
        return value.lower() if isinstance(value, str) else value


def _domain_error(error: pydantic.ValidationError) -> ValidationError:
    first = error.errors()[0]
    field = str(first["loc"][0]) if first["loc"] else "settings"
    return ValidationError(f"Invalid value for {ENV_PREFIX}{field.upper()}: {first['msg']}")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> BookingSettings:
    """Build settings from environment variables.

    Args:
        environ: Mapping to read from. Defaults to ``os.environ``.

    Returns:
        BookingSettings with defaults for every unset variable

    Raises:
        ValidationError: If a variable holds an invalid value
    """
    try:
        if environ is None:
            return BookingSettings()
        # Init values win over os.environ, so every field is passed explicitly
        values = {}
        for name, field in BookingSettings.model_fields.items():
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            values[name] = raw if raw else field.get_default(call_default_factory=True)
        return BookingSettings(**values)
    except pydantic.ValidationError as e:
        raise _domain_error(e) from e
