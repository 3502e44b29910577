"""Phone number normalisation backed by the phonenumbers library."""

from __future__ import annotations

import logging
from typing import Optional

import phonenumbers

from maps_leads.models import NO_PHONE

logger = logging.getLogger(__name__)


class PhoneValidator:
    """Turn a matched phone substring into E.164 form, or the NO_PHONE sentinel.

    The region is fixed at construction (``DEFAULT_PHONE_REGION``) and is only
    used for numbers written without an international prefix. ``validate``
    never raises: parse faults and invalid verdicts collapse to the sentinel.
    """

    def __init__(self, region: str = "US") -> None:
        self.region = (region or "US").upper()

    def validate(self, raw_phone: Optional[str], region_hint: Optional[str] = None) -> str:
        if not raw_phone or not str(raw_phone).strip() or raw_phone == NO_PHONE:
            return NO_PHONE

        region = (region_hint or self.region).upper()
        try:
            parsed = phonenumbers.parse(str(raw_phone).strip(), region)
            if not phonenumbers.is_valid_number(parsed):
                logger.debug("Rejected invalid phone number %r (region=%s)", raw_phone, region)
                return NO_PHONE
            return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
        except phonenumbers.NumberParseException as exc:
            logger.warning("Unable to parse phone %r: %s", raw_phone, exc)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Phone parser failed for %r: %s", raw_phone, exc)
        return NO_PHONE

    @staticmethod
    def is_valid(value: Optional[str]) -> bool:
        return bool(value) and value != NO_PHONE
