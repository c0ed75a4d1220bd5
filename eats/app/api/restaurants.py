"""Catalog queries and mutations."""

import dataclasses
from typing import Optional

import strawberry
from strawberry.types import Info

from eats.app.api.permissions import IsOwner
from eats.app.api.types import (
    AllCategoriesOutput,
    CategoryOutput,
    CategoryType,
    CreateDishInput,
    CreateDishOutput,
    CreateRestaurantInput,
    CreateRestaurantOutput,
    DishOptionInput,
    EditDishInput,
    EditRestaurantInput,
    MutationOutput,
    RestaurantOutput,
    RestaurantsOutput,
    RestaurantType,
)
from eats.app.services import restaurants as catalog


def _options(options: Optional[list[DishOptionInput]]) -> Optional[list[dict]]:
    if options is None:
        return None
    return [dataclasses.asdict(o) for o in options]


def _status(result) -> dict:
    return {"ok": result.ok, "error": result.error, "error_kind": result.error_kind}


@strawberry.type
class RestaurantQuery:
    @strawberry.field
    async def all_categories(self, info: Info) -> AllCategoriesOutput:
        async with info.context.session_lock:
            result = await info.context.restaurant_service.all_categories()
        return AllCategoriesOutput(
            **_status(result),
            categories=[
                CategoryType.from_model(c, result.restaurant_counts.get(c.id, 0))
                for c in result.categories
            ],
        )

    @strawberry.field
    async def category(self, info: Info, slug: str, page: int = 1) -> CategoryOutput:
        async with info.context.session_lock:
            result = await info.context.restaurant_service.find_category_by_slug(slug, page)
        return CategoryOutput(
            **_status(result),
            total_pages=result.total_pages,
            total_results=result.total_results,
            category=CategoryType.from_model(result.category, result.total_results)
            if result.category else None,
            restaurants=[RestaurantType.from_model(r) for r in result.restaurants],
        )

    @strawberry.field
    async def restaurants(self, info: Info, page: int = 1) -> RestaurantsOutput:
        async with info.context.session_lock:
            result = await info.context.restaurant_service.all_restaurants(page)
        return RestaurantsOutput(
            **_status(result),
            total_pages=result.total_pages,
            total_results=result.total_results,
            results=[RestaurantType.from_model(r) for r in result.results],
        )

    @strawberry.field
    async def restaurant(self, info: Info, restaurant_id: int) -> RestaurantOutput:
        async with info.context.session_lock:
            result = await info.context.restaurant_service.find_restaurant_by_id(restaurant_id)
        return RestaurantOutput(
            **_status(result),
            restaurant=RestaurantType.from_model(result.restaurant) if result.restaurant else None,
        )

    @strawberry.field
    async def search_restaurant(self, info: Info, query: str, page: int = 1) -> RestaurantsOutput:
        async with info.context.session_lock:
            result = await info.context.restaurant_service.search_restaurants_by_name(query, page)
        return RestaurantsOutput(
            **_status(result),
            total_pages=result.total_pages,
            total_results=result.total_results,
            results=[RestaurantType.from_model(r) for r in result.results],
        )


@strawberry.type
class RestaurantMutation:
    @strawberry.mutation(permission_classes=[IsOwner])
    async def create_restaurant(self, info: Info, input: CreateRestaurantInput) -> CreateRestaurantOutput:
        result = await info.context.restaurant_service.create_restaurant(
            info.context.user,
            catalog.CreateRestaurantInput(
                name=input.name,
                cover_image=input.cover_image,
                address=input.address,
                category_name=input.category_name,
            ),
        )
        return CreateRestaurantOutput(**_status(result), restaurant_id=result.restaurant_id)

    @strawberry.mutation(permission_classes=[IsOwner])
    async def edit_restaurant(self, info: Info, input: EditRestaurantInput) -> MutationOutput:
        result = await info.context.restaurant_service.edit_restaurant(
            info.context.user,
            catalog.EditRestaurantInput(
                restaurant_id=input.restaurant_id,
                name=input.name,
                cover_image=input.cover_image,
                address=input.address,
                category_name=input.category_name,
            ),
        )
        return MutationOutput.from_result(result)

    @strawberry.mutation(permission_classes=[IsOwner])
    async def delete_restaurant(self, info: Info, restaurant_id: int) -> MutationOutput:
        result = await info.context.restaurant_service.delete_restaurant(info.context.user, restaurant_id)
        return MutationOutput.from_result(result)

    @strawberry.mutation(permission_classes=[IsOwner])
    async def create_dish(self, info: Info, input: CreateDishInput) -> CreateDishOutput:
        result = await info.context.restaurant_service.create_dish(
            info.context.user,
            catalog.CreateDishInput(
                restaurant_id=input.restaurant_id,
                name=input.name,
                price=input.price,
                description=input.description,
                photo=input.photo,
                options=_options(input.options),
            ),
        )
        return CreateDishOutput(**_status(result), dish_id=result.dish_id)

    @strawberry.mutation(permission_classes=[IsOwner])
    async def edit_dish(self, info: Info, input: EditDishInput) -> MutationOutput:
        result = await info.context.restaurant_service.edit_dish(
            info.context.user,
            catalog.EditDishInput(
                dish_id=input.dish_id,
                name=input.name,
                price=input.price,
                description=input.description,
                photo=input.photo,
                options=_options(input.options),
            ),
        )
        return MutationOutput.from_result(result)

    @strawberry.mutation(permission_classes=[IsOwner])
    async def delete_dish(self, info: Info, dish_id: int) -> MutationOutput:
        result = await info.context.restaurant_service.delete_dish(info.context.user, dish_id)
        return MutationOutput.from_result(result)
