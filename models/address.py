"""Address and contact value schemas stored as JSON on clients and projects."""

from typing import Literal

from pydantic import BaseModel, model_validator

from services.addresses import DEFAULT_COUNTRY, country_to_region, parse_street


class Address(BaseModel):
    """Postal address. Region is the ISO code of ``country``."""

    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: Literal["Australia", "United States", "Norway"] = DEFAULT_COUNTRY
    region: Literal["AU", "US", "NO"] | None = None
    street_number: str = ""
    full_address: str = ""

    @model_validator(mode="after")
    def fill_derived_fields(self) -> "Address":
        if self.region is None:
            self.region = country_to_region(self.country)

        if not self.street_number and self.full_address:
            parsed = parse_street(self.full_address)
            if parsed:
                self.street_number, street_name = parsed
                if not self.line1:
                    self.line1 = street_name
        return self


class Contact(BaseModel):
    """Contact person on a client record."""

    name: str = ""
    email: str = ""
    phone: str = ""
    accounts_email: str = ""
