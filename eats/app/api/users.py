"""Account queries and mutations."""

import strawberry
from strawberry.types import Info

from eats.app.api.permissions import IsAuthenticated
from eats.app.api.types import (
    CreateAccountInput,
    EditProfileInput,
    LoginInput,
    LoginOutput,
    MutationOutput,
    UserProfileOutput,
    UsersOutput,
    UserType,
)
from eats.app.services import users


@strawberry.type
class UserQuery:
    @strawberry.field(permission_classes=[IsAuthenticated])
    def me(self, info: Info) -> UserType:
        """The authenticated caller."""
        return UserType.from_model(info.context.user)

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def user_profile(self, info: Info, user_id: int) -> UserProfileOutput:
        async with info.context.session_lock:
            result = await info.context.user_service.find_by_id(user_id)
        return UserProfileOutput(
            ok=result.ok,
            error=result.error,
            error_kind=result.error_kind,
            user=UserType.from_model(result.user) if result.user else None,
        )

    @strawberry.field(permission_classes=[IsAuthenticated])
    async def get_all_users(self, info: Info) -> UsersOutput:
        async with info.context.session_lock:
            result = await info.context.user_service.get_all_users()
        return UsersOutput(
            ok=result.ok,
            error=result.error,
            error_kind=result.error_kind,
            users=[UserType.from_model(u) for u in result.users] if result.ok else None,
        )


@strawberry.type
class UserMutation:
    @strawberry.mutation
    async def create_account(self, info: Info, input: CreateAccountInput) -> MutationOutput:
        result = await info.context.user_service.create_account(
            users.CreateAccountInput(email=input.email, password=input.password, role=input.role)
        )
        return MutationOutput.from_result(result)

    @strawberry.mutation
    async def login(self, info: Info, input: LoginInput) -> LoginOutput:
        result = await info.context.user_service.login(
            users.LoginInput(email=input.email, password=input.password)
        )
        return LoginOutput(
            ok=result.ok, error=result.error, error_kind=result.error_kind, token=result.token
        )

    @strawberry.mutation(permission_classes=[IsAuthenticated])
    async def edit_profile(self, info: Info, input: EditProfileInput) -> MutationOutput:
        result = await info.context.user_service.edit_profile(
            info.context.user.id,
            users.EditProfileInput(email=input.email, password=input.password),
        )
        return MutationOutput.from_result(result)

    @strawberry.mutation
    async def verify_email(self, info: Info, code: str) -> MutationOutput:
        result = await info.context.user_service.verify_email(code)
        return MutationOutput.from_result(result)
