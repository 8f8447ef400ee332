# src/api/calls.py
# one function per backend endpoint
from __future__ import annotations

from typing import Any, Dict, List, Optional

from api import models
from api.transport import UNKNOWN_CODE, ApiError, call


def _to_int(val) -> Optional[int]:
    try:
        return int(val)
    except (TypeError, ValueError):
        return None


def _str_map(val) -> Dict[str, str]:
    if not isinstance(val, dict):
        return {}
    return {str(k): str(v) for k, v in val.items()}


def _to_product(row: Dict[str, Any]) -> models.Product:
    ext = row.get("ext") or {}
    return models.Product(
        id=int(row["id"]),
        name=row.get("name") or "",
        merchant_id=_to_int(row.get("merchant_id")) or 0,
        desc=ext.get("desc") or "",
    )


def _to_sku(row: Dict[str, Any]) -> models.Sku:
    return models.Sku(
        id=int(row["id"]),
        product_id=_to_int(row.get("product_id")) or 0,
        sku_code=row.get("sku_code") or "",
        price=_to_int(row.get("price")) or 0,
        stock=_to_int(row.get("stock")) or 0,
    )


def _to_order(row: Dict[str, Any]) -> models.Order:
    items = [
        models.OrderItem(
            product_id=_to_int(it.get("product_id")) or 0,
            sku_id=_to_int(it.get("sku_id")) or 0,
            count=_to_int(it.get("count")) or 0,
            price=_to_int(it.get("price")) or 0,
            ext=_str_map(it.get("ext")),
        )
        for it in row.get("items") or []
    ]
    return models.Order(
        id=str(row.get("id", "")),
        type=_to_int(row.get("type")) or 0,
        status=_to_int(row.get("status")) or 0,
        req_user_id=_to_int(row.get("req_user_id")) or 0,
        resp_user_id=_to_int(row.get("resp_user_id")) or 0,
        items=items,
        created_at=row.get("created_at") or "",
        updated_at=row.get("updated_at") or "",
        ext=_str_map(row.get("ext")),
    )


# ---------------------------
# Products
# ---------------------------


async def create_product(merchant_id: int, name: str, desc: str) -> None:
    await call(
        "/create_product",
        {"merchant_id": merchant_id, "name": name, "ext": {"desc": desc}},
    )


async def list_products(
    merchant_id: int, page_num: int = 1, page_size: int = 20
) -> List[models.Product]:
    body = await call(
        "/list_product",
        {"merchant_id": merchant_id, "page_num": page_num, "page_size": page_size},
        require_envelope=False,
    )
    return [_to_product(row) for row in body.get("products") or []]


async def delete_product(merchant_id: int, product_id: int) -> None:
    await call(
        "/delete_product", {"merchant_id": merchant_id, "product_id": product_id}
    )


# ---------------------------
# SKUs
# ---------------------------


async def list_skus(merchant_id: int, product_id: int) -> List[models.Sku]:
    body = await call(
        "/list_sku",
        {"merchant_id": merchant_id, "product_id": product_id},
        require_envelope=False,
    )
    return [_to_sku(row) for row in body.get("skus") or []]


async def create_sku(
    merchant_id: int, product_id: int, sku_code: str, price: int, stock: int
) -> None:
    """price is in fen."""
    await call(
        "/create_sku",
        {
            "merchant_id": merchant_id,
            "product_id": product_id,
            "sku_code": sku_code,
            "price": price,
            "stock": stock,
        },
    )


async def deduct_sku_stock(sku_id: int, count: int) -> None:
    await call("/deduct_sku", {"sku_id": sku_id, "count": count})


# ---------------------------
# Merchants
# ---------------------------


async def list_merchants() -> List[models.Merchant]:
    body = await call("/list_merchant", {})
    rows = body.get("data")
    if not isinstance(rows, list):
        return []
    return [
        models.Merchant(id=int(row["id"]), name=(row.get("name") or "").strip())
        for row in rows
    ]


# ---------------------------
# Auth & Registration
# ---------------------------


async def generate_captcha(
    target_type: int, target: str, biz_type: str = "user_register"
) -> None:
    await call(
        "/generate_captcha",
        {"type": target_type, "target": target, "biz_type": biz_type},
    )


async def register(
    username: str,
    target: str,
    target_type: int,
    password: str,
    captcha: str,
    user_type: int,
) -> None:
    await call(
        "/register",
        {
            "username": username,
            "target": target,
            "target_type": target_type,
            "password": password,
            "captcha": captcha,
            "user_type": user_type,
        },
    )


async def login(target: str, target_type: int, password: str) -> Optional[str]:
    """Return the issued token, or None if the backend sent none.

    target_type must already be in the login endpoint's numbering.
    """
    body = await call(
        "/login",
        {"target": target, "target_type": target_type, "password": password},
    )
    return body.get("token") or None


# ---------------------------
# Orders
# ---------------------------


async def create_order(request: Dict[str, Any]) -> str:
    """Submit an order and return the id the backend assigned to it."""
    body = await call("/create_order", request)
    order_id = body.get("order_id")
    if order_id is None or str(order_id) == "":
        raise ApiError(UNKNOWN_CODE, "no order id was returned")
    return str(order_id)


async def query_order_ids(
    query_type: int, user_id: int, page: int, page_size: int
) -> models.OrderIdPage:
    body = await call(
        "/query_order_id",
        {
            "type": int(query_type),
            "user_id": user_id,
            "page": page,
            "page_size": page_size,
        },
    )
    ids = body.get("order_id")
    return models.OrderIdPage(
        order_ids=[str(i) for i in ids] if isinstance(ids, list) else [],
        total=_to_int(body.get("total")) or 0,
        page=_to_int(body.get("page")),
        page_size=_to_int(body.get("page_size")),
    )


async def query_order_info(order_id: str) -> Optional[models.Order]:
    body = await call("/query_order_info", {"id": order_id})
    order = body.get("order")
    if not order:
        return None
    return _to_order(order)
