"""Root GraphQL schema and its FastAPI router."""

import strawberry
from strawberry.fastapi import GraphQLRouter

from eats.app.api.context import get_context
from eats.app.api.restaurants import RestaurantMutation, RestaurantQuery
from eats.app.api.users import UserMutation, UserQuery


@strawberry.type
class Query(UserQuery, RestaurantQuery):
    pass


@strawberry.type
class Mutation(UserMutation, RestaurantMutation):
    pass


schema = strawberry.Schema(query=Query, mutation=Mutation)


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(schema, context_getter=get_context)
