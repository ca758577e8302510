"""
Site settings schemas: the config/global document
"""

from pydantic import BaseModel, Field

# Fallback WhatsApp line when neither a shop nor a contact number is set
FALLBACK_WHATSAPP = "233553065304"


class SiteSettings(BaseModel):
    # Branding / contact
    site_name: str = "Jay-Besin Logistics"
    contact_email: str = "info@jaybesin.com"
    contact_phone: str = ""
    whatsapp_number: str = ""
    shop_whatsapp: str = ""
    tracking_domain: str = "jaybesin.com"

    # Document issuer
    company_name: str = "JayBesin Logistics"
    company_address: str = "Cargo Village, KIA, Accra, Ghana"
    company_email: str = "accounts@jaybesin.com"
    company_phone: str = "+233 24 412 3456"
    logo_url: str = ""  # local path or http(s) URL
    primary_color: str = "#2563eb"

    # Finance
    currency_rate: float = 15.8  # GHS per USD
    bank_name: str = "Ecobank Ghana"
    account_name: str = "JayBesin Logistics Ltd"
    account_number: str = "1441000123456"
    terms_and_conditions: str = "Freight charges must be paid in full before cargo release."
    footer_text: str = "Thank you for shipping with JayBesin Logistics."

    model_config = {"extra": "ignore"}

    @property
    def shop_phone(self) -> str:
        return self.shop_whatsapp or self.contact_phone or FALLBACK_WHATSAPP

    @property
    def contact_whatsapp(self) -> str:
        return self.whatsapp_number or self.contact_phone or FALLBACK_WHATSAPP


class SiteSettingsUpdate(BaseModel):
    """Partial settings push; only the fields sent are merged."""
    site_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    whatsapp_number: str | None = None
    shop_whatsapp: str | None = None
    tracking_domain: str | None = None
    company_name: str | None = None
    company_address: str | None = None
    company_email: str | None = None
    company_phone: str | None = None
    logo_url: str | None = None
    primary_color: str | None = None
    currency_rate: float | None = Field(None, gt=0)
    bank_name: str | None = None
    account_name: str | None = None
    account_number: str | None = None
    terms_and_conditions: str | None = None
    footer_text: str | None = None


class PublicSettings(BaseModel):
    site_name: str
    contact_email: str
    contact_phone: str
    whatsapp_number: str
    shop_whatsapp: str
    tracking_domain: str
    currency_rate: float
