"""Catalog models: categories, restaurants and their dishes."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eats.app.core.database import CoreModel
from eats.app.models.user import User


def slugify(name: str) -> str:
    """'  Korean BBQ ' -> 'korean-bbq'."""
    return "-".join(name.strip().lower().split())


class Category(CoreModel):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    cover_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Category {self.slug}>"


class Restaurant(CoreModel):
    """A restaurant listed by an owner."""

    __tablename__ = "restaurants"

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    cover_image: Mapped[str] = mapped_column(String(500), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    is_promoted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    promoted_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    category: Mapped[Optional[Category]] = relationship()
    owner: Mapped[User] = relationship()
    menu: Mapped[list["Dish"]] = relationship(
        back_populates="restaurant",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Dish.id",
    )

    def __repr__(self) -> str:
        return f"<Restaurant {self.name}>"


class Dish(CoreModel):
    """A menu item. ``options`` holds [{name, choices: [{name, extra}], extra}]."""

    __tablename__ = "dishes"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    photo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(JSON, nullable=True)
    restaurant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True
    )

    restaurant: Mapped[Restaurant] = relationship(back_populates="menu")

    def __repr__(self) -> str:
        return f"<Dish {self.name}>"
