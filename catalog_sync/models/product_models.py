from decimal import Decimal
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from catalog_sync.constants.woocommerce import StockStatus


class ProductImage(BaseModel):
    """Image reference attached to a remote product"""
    id: Optional[int] = Field(None, description="Remote media ID")
    src: Optional[str] = Field(None, description="Source URL of the media")

    class Config:
        extra = "ignore"


class ProductFields(BaseModel):
    """Fields shared by every product representation"""

    sku: Optional[str] = None
    name: Optional[str] = None

    # Prices
    price: Optional[Decimal] = None
    regular_price: Optional[Decimal] = None
    sale_price: Optional[Decimal] = Field(None, description="Only set while on sale")

    # Inventory
    stock_quantity: Optional[int] = None
    stock_status: Optional[StockStatus] = None
    manage_stock: Optional[bool] = None
    backorders_allowed: Optional[bool] = None

    status: Optional[str] = None
    images: Optional[List[ProductImage]] = None

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("price", "regular_price", "sale_price", "sku", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        # WooCommerce sends "" for unset prices and skus
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Product(ProductFields):
    """A catalog item as known by the source or confirmed by the remote platform"""
    remote_id: Optional[int] = Field(None, alias="id", description="ID assigned by WooCommerce")
    images: List[ProductImage] = Field(default_factory=list)

    @field_validator("images", mode="before")
    @classmethod
    def _null_images(cls, value: Any) -> Any:
        return [] if value is None else value


class ProductCreate(ProductFields):
    """Create payload: the full record without a remote ID"""

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class ProductUpdate(ProductFields):
    """
    Update payload: the remote ID plus only the fields that changed.

    The remote API treats a missing field as "leave unchanged", so the set of
    explicitly assigned fields is the contract, not the field values.
    """
    remote_id: int = Field(..., alias="id")

    @property
    def changed_fields(self) -> Set[str]:
        return set(self.model_fields_set) - {"remote_id"}

    def to_payload(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        # An explicit empty sale price ends a sale on the remote side
        if "sale_price" in data and data["sale_price"] is None:
            data["sale_price"] = ""
        return data


class ProductBatch(BaseModel):
    """Pending writes produced by one diff"""
    create: Optional[List[ProductCreate]] = None
    update: Optional[List[ProductUpdate]] = None

    @property
    def is_empty(self) -> bool:
        return not self.create and not self.update

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if self.create:
            payload["create"] = [item.to_payload() for item in self.create]
        if self.update:
            payload["update"] = [item.to_payload() for item in self.update]
        return payload


class BatchItemError(BaseModel):
    """Per-item error returned inside an otherwise successful batch response"""
    sku: Optional[str] = None
    remote_id: Optional[int] = None
    code: Optional[str] = None
    message: str


class BatchResult(BaseModel):
    """Confirmation of a batch upload by the remote platform"""
    create: List[Product] = Field(default_factory=list)
    update: List[Product] = Field(default_factory=list)
    rejected: List[BatchItemError] = Field(default_factory=list)


class MediaObject(BaseModel):
    """Media item stored by the WordPress media library"""
    id: int
    source_url: str

    class Config:
        extra = "ignore"
