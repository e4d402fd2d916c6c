"""
Query and response models for the Azure Retail Prices API.

PriceQuery is built by callers; PriceItem and PriceResponse mirror the
JSON wire format (camelCase item fields, PascalCase envelope fields).
Absent or null JSON values become the field's zero value so callers never
see None.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


@dataclass(frozen=True)
class PriceQuery:
    """
    Filter for a pricing lookup. Empty fields are not filtered on.

    Attributes:
        region: Azure region, e.g. "eastus" (armRegionName)
        sku: ARM SKU name, e.g. "Standard_B1s" (armSkuName)
        service: Service name, e.g. "Virtual Machines" (serviceName)
        product: Product name (productName)
        currency: ISO currency code, e.g. "USD" (currencyCode)
    """

    region: str = ""
    sku: str = ""
    service: str = ""
    product: str = ""
    currency: str = ""


class _WireModel(BaseModel):
    """Base for wire models: aliases on the wire, null means zero value."""

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class PriceItem(_WireModel):
    """A single retail price record."""

    arm_region_name: str = Field(default="", alias="armRegionName")
    arm_sku_name: str = Field(default="", alias="armSkuName")
    currency_code: str = Field(default="", alias="currencyCode")
    effective_start_date: str = Field(default="", alias="effectiveStartDate")
    is_primary_meter_region: bool = Field(default=False, alias="isPrimaryMeterRegion")
    meter_id: str = Field(default="", alias="meterId")
    meter_name: str = Field(default="", alias="meterName")
    product_id: str = Field(default="", alias="productId")
    product_name: str = Field(default="", alias="productName")
    retail_price: float = Field(default=0.0, alias="retailPrice")
    service_family: str = Field(default="", alias="serviceFamily")
    service_id: str = Field(default="", alias="serviceId")
    service_name: str = Field(default="", alias="serviceName")
    sku_id: str = Field(default="", alias="skuId")
    sku_name: str = Field(default="", alias="skuName")
    tier_minimum_units: float = Field(default=0.0, alias="tierMinimumUnits")
    type: str = Field(default="", alias="type")
    unit_of_measure: str = Field(default="", alias="unitOfMeasure")
    unit_price: float = Field(default=0.0, alias="unitPrice")
    # Only present on reservation prices
    reservation_term: str = Field(default="", alias="reservationTerm")

    def to_wire(self) -> dict[str, Any]:
        """Serialize back to the API's camelCase shape."""
        return self.model_dump(by_alias=True)


class PriceResponse(_WireModel):
    """One page of results."""

    billing_currency: str = Field(default="", alias="BillingCurrency")
    customer_entity_id: str = Field(default="", alias="CustomerEntityId")
    customer_entity_type: str = Field(default="", alias="CustomerEntityType")
    items: list[PriceItem] = Field(default_factory=list, alias="Items")
    next_page_link: str = Field(default="", alias="NextPageLink")
    count: int = Field(default=0, alias="Count")


__all__ = [
    "PriceItem",
    "PriceQuery",
    "PriceResponse",
]
