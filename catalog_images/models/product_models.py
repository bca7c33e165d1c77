from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

ResourceId = Union[int, str]


class ProductImage(BaseModel):
    """Imagen de un producto en Tiendanube"""
    id: ResourceId
    src: Optional[str] = None
    position: Optional[int] = None

    class Config:
        extra = "ignore"


class ProductVariant(BaseModel):
    """Variante de un producto; el SKU la relaciona con las imágenes de Drive"""
    id: Optional[ResourceId] = None
    sku: Optional[str] = Field(None, description="SKU de la variante")

    class Config:
        extra = "ignore"

    @field_validator("sku", mode="before")
    @classmethod
    def blank_sku_is_absent(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None


class Product(BaseModel):
    """Producto del catálogo tal como lo devuelve GET /products"""
    id: ResourceId
    images: List[ProductImage] = Field(default_factory=list)
    variants: List[ProductVariant] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @field_validator("images", "variants", mode="before")
    @classmethod
    def null_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ImageUploadRequest(BaseModel):
    """Body for POST /products/{id}/images"""
    src: str
    position: int
    alt: str

    @classmethod
    def for_sku(cls, src: str, index: int, sku: str) -> "ImageUploadRequest":
        position = index + 1
        return cls(src=src, position=position, alt=f"Imagen {position} para SKU {sku}")


class ImageSyncResult(BaseModel):
    """Resultado de una operación sobre una imagen o variante"""
    product_id: ResourceId
    action: str  # created, deleted, skipped, error
    success: bool
    message: str
    sku: Optional[str] = None
    image_id: Optional[ResourceId] = None
    position: Optional[int] = None
    error_details: Optional[str] = None


class SyncRunSummary(BaseModel):
    """Counters reported at the end of a run"""
    pages: int = 0
    products: int = 0
