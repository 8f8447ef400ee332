# provide dataclass models for backend payloads
# prices are integer minor units (fen)

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Merchant:
    id: int
    name: str


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    merchant_id: int
    desc: str


@dataclass(frozen=True)
class Sku:
    id: int
    product_id: int
    sku_code: str
    price: int
    stock: int


@dataclass(frozen=True)
class OrderItem:
    product_id: int
    sku_id: int
    count: int
    price: int
    ext: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Order:
    id: str
    type: int
    status: int
    req_user_id: int
    resp_user_id: int
    items: List[OrderItem]
    created_at: str
    updated_at: str
    ext: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class OrderIdPage:
    order_ids: List[str]
    total: int
    page: Optional[int]
    page_size: Optional[int]
