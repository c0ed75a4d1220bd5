"""Restaurant catalog: categories, restaurants and dishes.

Mutations check that the acting owner owns the restaurant before writing.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from eats.app.core.errors import ErrorKind
from eats.app.models.restaurant import Category, Dish, Restaurant, slugify
from eats.app.models.user import User
from eats.app.services.common import (
    PAGE_SIZE,
    CoreOutput,
    PaginationOutput,
    page_offset,
    total_pages,
)

logger = logging.getLogger(__name__)

RESTAURANT_NOT_FOUND = "Restaurant not found"
DISH_NOT_FOUND = "Dish not found"
NOT_YOUR_RESTAURANT = "You can't do that, the restaurant is not yours"


# ── Inputs / outputs ────────────────────────────────────────────────


@dataclass
class CreateRestaurantInput:
    name: str
    cover_image: str
    address: str
    category_name: str


@dataclass
class EditRestaurantInput:
    restaurant_id: int
    name: Optional[str] = None
    cover_image: Optional[str] = None
    address: Optional[str] = None
    category_name: Optional[str] = None


@dataclass
class CreateDishInput:
    restaurant_id: int
    name: str
    price: int
    description: str
    photo: Optional[str] = None
    options: Optional[list[dict[str, Any]]] = None


@dataclass
class EditDishInput:
    dish_id: int
    name: Optional[str] = None
    price: Optional[int] = None
    description: Optional[str] = None
    photo: Optional[str] = None
    options: Optional[list[dict[str, Any]]] = None


@dataclass
class CreateRestaurantOutput(CoreOutput):
    restaurant_id: Optional[int] = None


@dataclass
class AllCategoriesOutput(CoreOutput):
    categories: list[Category] = field(default_factory=list)
    restaurant_counts: dict[int, int] = field(default_factory=dict)


@dataclass
class CategoryOutput(PaginationOutput):
    category: Optional[Category] = None
    restaurants: list[Restaurant] = field(default_factory=list)


@dataclass
class RestaurantsOutput(PaginationOutput):
    results: list[Restaurant] = field(default_factory=list)


@dataclass
class RestaurantOutput(CoreOutput):
    restaurant: Optional[Restaurant] = None


@dataclass
class CreateDishOutput(CoreOutput):
    dish_id: Optional[int] = None


def _patch(target: Any, values: dict[str, Any]) -> None:
    for name, value in values.items():
        if value is not None:
            setattr(target, name, value)


# ── Service ─────────────────────────────────────────────────────────


class RestaurantService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_or_create_category(self, name: str) -> Category:
        slug = slugify(name)
        result = await self.session.execute(select(Category).where(Category.slug == slug))
        category = result.scalar_one_or_none()
        if category is None:
            category = Category(name=name.strip(), slug=slug)
            self.session.add(category)
            await self.session.flush()
        return category

    async def _owned_restaurant(self, owner: User, restaurant_id: int) -> tuple[Optional[Restaurant], Optional[CoreOutput]]:
        restaurant = await self.session.get(Restaurant, restaurant_id)
        if restaurant is None:
            return None, CoreOutput.fail(ErrorKind.NOT_FOUND, RESTAURANT_NOT_FOUND)
        if restaurant.owner_id != owner.id:
            return None, CoreOutput.fail(ErrorKind.FORBIDDEN, NOT_YOUR_RESTAURANT)
        return restaurant, None

    async def _owned_dish(self, owner: User, dish_id: int) -> tuple[Optional[Dish], Optional[CoreOutput]]:
        result = await self.session.execute(
            select(Dish).options(selectinload(Dish.restaurant)).where(Dish.id == dish_id)
        )
        dish = result.scalar_one_or_none()
        if dish is None:
            return None, CoreOutput.fail(ErrorKind.NOT_FOUND, DISH_NOT_FOUND)
        if dish.restaurant.owner_id != owner.id:
            return None, CoreOutput.fail(ErrorKind.FORBIDDEN, NOT_YOUR_RESTAURANT)
        return dish, None

    async def _fail(self, message: str, output: type[CoreOutput] = CoreOutput, **fields) -> CoreOutput:
        logger.exception(message)
        await self.session.rollback()
        return output.fail(ErrorKind.DEPENDENCY_FAILURE, message, **fields)

    # Restaurants

    async def create_restaurant(self, owner: User, data: CreateRestaurantInput) -> CreateRestaurantOutput:
        try:
            restaurant = Restaurant(
                name=data.name,
                cover_image=data.cover_image,
                address=data.address,
                owner_id=owner.id,
            )
            restaurant.category = await self.get_or_create_category(data.category_name)
            self.session.add(restaurant)
            await self.session.commit()
        except Exception:
            return await self._fail("Could not create restaurant", CreateRestaurantOutput)
        logger.info("Owner %s created restaurant %s", owner.id, restaurant.id)
        return CreateRestaurantOutput(ok=True, restaurant_id=restaurant.id)

    async def edit_restaurant(self, owner: User, data: EditRestaurantInput) -> CoreOutput:
        try:
            restaurant, denied = await self._owned_restaurant(owner, data.restaurant_id)
            if denied:
                return denied
            _patch(restaurant, {
                "name": data.name,
                "cover_image": data.cover_image,
                "address": data.address,
            })
            if data.category_name:
                restaurant.category = await self.get_or_create_category(data.category_name)
            await self.session.commit()
        except Exception:
            return await self._fail("Could not edit restaurant")
        return CoreOutput(ok=True)

    async def delete_restaurant(self, owner: User, restaurant_id: int) -> CoreOutput:
        try:
            restaurant, denied = await self._owned_restaurant(owner, restaurant_id)
            if denied:
                return denied
            await self.session.delete(restaurant)
            await self.session.commit()
        except Exception:
            return await self._fail("Could not delete restaurant")
        logger.info("Owner %s deleted restaurant %s", owner.id, restaurant_id)
        return CoreOutput(ok=True)

    async def all_restaurants(self, page: int = 1) -> RestaurantsOutput:
        try:
            results = await self.session.execute(
                select(Restaurant)
                .options(selectinload(Restaurant.category))
                .order_by(Restaurant.is_promoted.desc(), Restaurant.id)
                .offset(page_offset(page))
                .limit(PAGE_SIZE)
            )
            total = await self.session.scalar(select(func.count(Restaurant.id)))
        except Exception:
            return await self._fail("Could not load restaurants", RestaurantsOutput)
        return RestaurantsOutput(
            ok=True,
            results=list(results.scalars().all()),
            total_results=total,
            total_pages=total_pages(total),
        )

    async def find_restaurant_by_id(self, restaurant_id: int) -> RestaurantOutput:
        try:
            result = await self.session.execute(
                select(Restaurant)
                .options(selectinload(Restaurant.menu), selectinload(Restaurant.category))
                .where(Restaurant.id == restaurant_id)
            )
            restaurant = result.scalar_one_or_none()
        except Exception:
            return await self._fail("Could not load restaurant", RestaurantOutput)
        if restaurant is None:
            return RestaurantOutput.fail(ErrorKind.NOT_FOUND, RESTAURANT_NOT_FOUND)
        return RestaurantOutput(ok=True, restaurant=restaurant)

    async def search_restaurants_by_name(self, query: str, page: int = 1) -> RestaurantsOutput:
        """Case-insensitive substring match on the restaurant name."""
        condition = Restaurant.name.icontains(query, autoescape=True)
        try:
            results = await self.session.execute(
                select(Restaurant)
                .options(selectinload(Restaurant.category))
                .where(condition)
                .order_by(Restaurant.id)
                .offset(page_offset(page))
                .limit(PAGE_SIZE)
            )
            total = await self.session.scalar(select(func.count(Restaurant.id)).where(condition))
        except Exception:
            return await self._fail("Could not search for restaurants", RestaurantsOutput)
        return RestaurantsOutput(
            ok=True,
            results=list(results.scalars().all()),
            total_results=total,
            total_pages=total_pages(total),
        )

    # Categories

    async def all_categories(self) -> AllCategoriesOutput:
        try:
            result = await self.session.execute(select(Category).order_by(Category.name))
            counts = await self._restaurant_counts()
        except Exception:
            return await self._fail("Could not load categories", AllCategoriesOutput)
        return AllCategoriesOutput(
            ok=True, categories=list(result.scalars().all()), restaurant_counts=counts
        )

    async def _count_restaurants(self, category_id: int) -> int:
        return await self.session.scalar(
            select(func.count(Restaurant.id)).where(Restaurant.category_id == category_id)
        )

    async def _restaurant_counts(self) -> dict[int, int]:
        """Number of restaurants per category id (categories with none are absent)."""
        result = await self.session.execute(
            select(Restaurant.category_id, func.count(Restaurant.id))
            .where(Restaurant.category_id.is_not(None))
            .group_by(Restaurant.category_id)
        )
        return {category_id: count for category_id, count in result.all()}

    async def find_category_by_slug(self, slug: str, page: int = 1) -> CategoryOutput:
        try:
            result = await self.session.execute(select(Category).where(Category.slug == slug))
            category = result.scalar_one_or_none()
            if category is None:
                return CategoryOutput.fail(ErrorKind.NOT_FOUND, "Category not found")
            restaurants = await self.session.execute(
                select(Restaurant)
                .options(selectinload(Restaurant.category))
                .where(Restaurant.category_id == category.id)
                .order_by(Restaurant.is_promoted.desc(), Restaurant.id)
                .offset(page_offset(page))
                .limit(PAGE_SIZE)
            )
            total = await self._count_restaurants(category.id)
        except Exception:
            return await self._fail("Could not load category", CategoryOutput)
        return CategoryOutput(
            ok=True,
            category=category,
            restaurants=list(restaurants.scalars().all()),
            total_results=total,
            total_pages=total_pages(total),
        )

    # Dishes

    async def create_dish(self, owner: User, data: CreateDishInput) -> CreateDishOutput:
        try:
            restaurant, denied = await self._owned_restaurant(owner, data.restaurant_id)
            if denied:
                return CreateDishOutput.fail(denied.error_kind, denied.error)
            dish = Dish(
                name=data.name,
                price=data.price,
                description=data.description,
                photo=data.photo,
                options=data.options,
                restaurant_id=restaurant.id,
            )
            self.session.add(dish)
            await self.session.commit()
        except Exception:
            return await self._fail("Could not create dish", CreateDishOutput)
        return CreateDishOutput(ok=True, dish_id=dish.id)

    async def edit_dish(self, owner: User, data: EditDishInput) -> CoreOutput:
        try:
            dish, denied = await self._owned_dish(owner, data.dish_id)
            if denied:
                return denied
            _patch(dish, {
                "name": data.name,
                "price": data.price,
                "description": data.description,
                "photo": data.photo,
                "options": data.options,
            })
            await self.session.commit()
        except Exception:
            return await self._fail("Could not edit dish")
        return CoreOutput(ok=True)

    async def delete_dish(self, owner: User, dish_id: int) -> CoreOutput:
        try:
            dish, denied = await self._owned_dish(owner, dish_id)
            if denied:
                return denied
            await self.session.delete(dish)
            await self.session.commit()
        except Exception:
            return await self._fail("Could not delete dish")
        return CoreOutput(ok=True)
