"""
Default Categories

The starter set every fresh store is seeded with: seven expense
categories and three income categories. Names are Thai, the language
the tracker ships in.

FALLBACK_CATEGORIES is a separate, fixed list with hard-coded ids. The
boundary serves it only when a durable backend is configured but the
store fails, so the UI never renders an empty category picker.
"""

from typing import Any
from uuid import uuid4

from src.models.finance import Category, InsertCategory


DEFAULT_CATEGORIES: tuple[InsertCategory, ...] = (
    InsertCategory(name="อาหาร", type="expense", icon="fas fa-utensils", color="hsl(var(--chart-1))"),
    InsertCategory(name="การเดินทาง", type="expense", icon="fas fa-car", color="hsl(var(--chart-2))"),
    InsertCategory(name="ที่อยู่อาศัย", type="expense", icon="fas fa-home", color="hsl(var(--chart-3))"),
    InsertCategory(name="ความบันเทิง", type="expense", icon="fas fa-film", color="hsl(var(--chart-4))"),
    InsertCategory(name="สาธารณูปโภค", type="expense", icon="fas fa-bolt", color="hsl(var(--chart-5))"),
    InsertCategory(name="สุขภาพ", type="expense", icon="fas fa-heart", color="hsl(var(--destructive))"),
    InsertCategory(name="ช้อปปิ้ง", type="expense", icon="fas fa-shopping-cart", color="hsl(var(--warning))"),
    InsertCategory(name="เงินเดือน", type="income", icon="fas fa-briefcase", color="hsl(var(--success))"),
    InsertCategory(name="งานฟรีแลนซ์", type="income", icon="fas fa-laptop", color="hsl(var(--success))"),
    InsertCategory(name="การลงทุน", type="income", icon="fas fa-chart-line", color="hsl(var(--success))"),
)


FALLBACK_CATEGORIES: tuple[Category, ...] = (
    Category(id="1", name="อาหาร", type="expense", icon="fas fa-utensils", color="hsl(var(--chart-1))"),
    Category(id="2", name="การเดินทาง", type="expense", icon="fas fa-car", color="hsl(var(--chart-2))"),
    Category(id="3", name="เงินเดือน", type="income", icon="fas fa-briefcase", color="hsl(var(--success))"),
)


def new_id() -> str:
    """Opaque unique identifier for a new record."""
    return str(uuid4())


def default_category_rows() -> list[dict[str, Any]]:
    """The default categories as insertable rows, each with a fresh id."""
    return [
        {"id": new_id(), **category.model_dump(mode="json")}
        for category in DEFAULT_CATEGORIES
    ]
