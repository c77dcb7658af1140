from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional


@dataclass(frozen=True)
class Category:
    name: str
    link: str


@dataclass
class ExtraInfo:
    """Fields only available on a product's detail page."""
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"description": self.description}


@dataclass
class Product:
    """One row of a listing table."""
    name: str
    sku: str
    price: str
    in_stock: bool
    unit: str
    stock_count: str
    link: str
    brand: str
    extra: Dict[str, Any] = field(default_factory=dict)

    def merge(self, info: ExtraInfo) -> None:
        """Shallow-overwrite the detail page fields onto this product."""
        self.extra.update(info.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        record = {
            "name": self.name,
            "sku": self.sku,
            "price": self.price,
            "inStock": self.in_stock,
            "unit": self.unit,
            "stockCount": self.stock_count,
            "link": self.link,
            "brand": self.brand,
        }
        record.update(self.extra)
        return record


@dataclass
class ListingPage:
    """Records extracted from one listing page plus its continuation link."""
    products: List[Product]
    next_link: Optional[str] = None
