"""GraphQL object and input types."""

from datetime import datetime
from typing import Any, Optional

import strawberry
from sqlalchemy import inspect

from eats.app.core.errors import ErrorKind
from eats.app.models.restaurant import Category, Dish, Restaurant
from eats.app.models.user import User, UserRole
from eats.app.services.common import CoreOutput

strawberry.enum(UserRole)
strawberry.enum(ErrorKind)


def _is_loaded(obj: Any, attr: str) -> bool:
    # Touching an unloaded relationship would trigger lazy IO outside the session's greenlet
    return attr not in inspect(obj).unloaded


# ── Users ───────────────────────────────────────────────────────────


@strawberry.type(name="User")
class UserType:
    id: int
    email: str
    role: UserRole
    verified: bool
    created_at: datetime

    @classmethod
    def from_model(cls, user: User) -> "UserType":
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            verified=user.verified,
            created_at=user.created_at,
        )


@strawberry.type
class MutationOutput:
    """Outcome of a mutation that returns no data."""

    ok: bool
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def from_result(cls, result: CoreOutput) -> "MutationOutput":
        return cls(ok=result.ok, error=result.error, error_kind=result.error_kind)


@strawberry.type
class LoginOutput(MutationOutput):
    token: Optional[str] = None


@strawberry.type
class UserProfileOutput(MutationOutput):
    user: Optional[UserType] = None


@strawberry.type
class UsersOutput(MutationOutput):
    users: Optional[list[UserType]] = None


@strawberry.input
class CreateAccountInput:
    email: str
    password: str
    role: UserRole


@strawberry.input
class LoginInput:
    email: str
    password: str


@strawberry.input
class EditProfileInput:
    email: Optional[str] = None
    password: Optional[str] = None


# ── Catalog ─────────────────────────────────────────────────────────


@strawberry.type(name="DishChoice")
class DishChoiceType:
    name: str
    extra: Optional[int] = None


@strawberry.type(name="DishOption")
class DishOptionType:
    name: str
    choices: Optional[list[DishChoiceType]] = None
    extra: Optional[int] = None

    @classmethod
    def from_dict(cls, option: dict[str, Any]) -> "DishOptionType":
        choices = option.get("choices")
        return cls(
            name=option["name"],
            extra=option.get("extra"),
            choices=[DishChoiceType(name=c["name"], extra=c.get("extra")) for c in choices]
            if choices is not None else None,
        )


@strawberry.input
class DishChoiceInput:
    name: str
    extra: Optional[int] = None


@strawberry.input
class DishOptionInput:
    name: str
    choices: Optional[list[DishChoiceInput]] = None
    extra: Optional[int] = None


@strawberry.type(name="Dish")
class DishType:
    id: int
    name: str
    price: int
    description: str
    photo: Optional[str] = None
    options: Optional[list[DishOptionType]] = None

    @classmethod
    def from_model(cls, dish: Dish) -> "DishType":
        return cls(
            id=dish.id,
            name=dish.name,
            price=dish.price,
            description=dish.description,
            photo=dish.photo,
            options=[DishOptionType.from_dict(o) for o in dish.options]
            if dish.options is not None else None,
        )


@strawberry.type(name="Category")
class CategoryType:
    id: int
    name: str
    slug: str
    cover_image: Optional[str] = None
    restaurant_count: Optional[int] = None

    @classmethod
    def from_model(cls, category: Category, restaurant_count: Optional[int] = None) -> "CategoryType":
        return cls(
            id=category.id,
            name=category.name,
            slug=category.slug,
            cover_image=category.cover_image,
            restaurant_count=restaurant_count,
        )


@strawberry.type(name="Restaurant")
class RestaurantType:
    id: int
    name: str
    cover_image: str
    address: str
    is_promoted: bool
    owner_id: int
    category: Optional[CategoryType] = None
    menu: Optional[list[DishType]] = None

    @classmethod
    def from_model(cls, restaurant: Restaurant) -> "RestaurantType":
        category = restaurant.category if _is_loaded(restaurant, "category") else None
        menu = None
        if _is_loaded(restaurant, "menu"):
            menu = [DishType.from_model(d) for d in restaurant.menu]
        return cls(
            id=restaurant.id,
            name=restaurant.name,
            cover_image=restaurant.cover_image,
            address=restaurant.address,
            is_promoted=restaurant.is_promoted,
            owner_id=restaurant.owner_id,
            category=CategoryType.from_model(category) if category else None,
            menu=menu,
        )


@strawberry.type
class CreateRestaurantOutput(MutationOutput):
    restaurant_id: Optional[int] = None


@strawberry.type
class CreateDishOutput(MutationOutput):
    dish_id: Optional[int] = None


@strawberry.type
class AllCategoriesOutput(MutationOutput):
    categories: Optional[list[CategoryType]] = None


@strawberry.type
class RestaurantOutput(MutationOutput):
    restaurant: Optional[RestaurantType] = None


@strawberry.type
class RestaurantsOutput(MutationOutput):
    total_pages: Optional[int] = None
    total_results: Optional[int] = None
    results: Optional[list[RestaurantType]] = None


@strawberry.type
class CategoryOutput(MutationOutput):
    total_pages: Optional[int] = None
    total_results: Optional[int] = None
    category: Optional[CategoryType] = None
    restaurants: Optional[list[RestaurantType]] = None


@strawberry.input
class CreateRestaurantInput:
    name: str
    cover_image: str
    address: str
    category_name: str


@strawberry.input
class EditRestaurantInput:
    restaurant_id: int
    name: Optional[str] = None
    cover_image: Optional[str] = None
    address: Optional[str] = None
    category_name: Optional[str] = None


@strawberry.input
class CreateDishInput:
    restaurant_id: int
    name: str
    price: int
    description: str
    photo: Optional[str] = None
    options: Optional[list[DishOptionInput]] = None


@strawberry.input
class EditDishInput:
    dish_id: int
    name: Optional[str] = None
    price: Optional[int] = None
    description: Optional[str] = None
    photo: Optional[str] = None
    options: Optional[list[DishOptionInput]] = None
