from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

from app.api.dependencies import get_users_service
from app.core.errors import UserAlreadyExistsError, UserNotFoundError
from app.models.user import NewUser, User, UserRole
from app.services.users_service import UsersService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

Service = Annotated[UsersService, Depends(get_users_service)]


# --- Pydantic schemas (camelCase on the wire) ---


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserCreateIn(_CamelModel):
    first_name: str = Field(min_length=1, examples=["John"])
    last_name: str = Field(min_length=1, examples=["Doe"])
    email: EmailStr = Field(examples=["john.doe@mail.com"])
    city: str | None = Field(default=None, examples=["New York"])
    role: UserRole | None = None

    def to_new_user(self) -> NewUser:
        return NewUser(
            first_name=self.first_name,
            last_name=self.last_name,
            email=str(self.email),
            city=self.city,
            role=self.role,
        )


class UserUpdateIn(_CamelModel):
    """Partial update. Only fields the client sent end up in the patch."""

    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    city: str | None = None
    role: UserRole | None = None

    @model_validator(mode="after")
    def _reject_null_required_fields(self) -> UserUpdateIn:
        # city is the only nullable column; null clears it.
        for name in ("first_name", "last_name", "email", "role"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} may not be null")
        return self

    def to_patch(self) -> dict[str, object]:
        patch = self.model_dump(exclude_unset=True)
        if "email" in patch:
            patch["email"] = str(patch["email"])
        return patch


class UserOut(_CamelModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    city: str | None
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            city=user.city,
            role=user.role,
        )


def _not_found(e: UserNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _conflict() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT, detail="email already exists"
    )


# --- Endpoints ---


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreateIn, service: Service) -> UserOut:
    try:
        user = await service.create(payload.to_new_user())
    except UserAlreadyExistsError:
        raise _conflict() from None
    return UserOut.from_user(user)


@router.get("", response_model=list[UserOut])
async def list_users(service: Service) -> list[UserOut]:
    return [UserOut.from_user(u) for u in await service.list_all()]


@router.get("/city/{city}", response_model=list[UserOut])
async def list_users_by_city(city: str, service: Service) -> list[UserOut]:
    try:
        users = await service.list_by_city(city)
    except UserNotFoundError as e:
        logger.info("No users matched city=%r", city)
        raise _not_found(e) from None
    return [UserOut.from_user(u) for u in users]


@router.get("/role/{role}", response_model=list[UserOut])
async def list_users_by_role(role: UserRole, service: Service) -> list[UserOut]:
    try:
        users = await service.list_by_role(role)
    except UserNotFoundError as e:
        logger.info("No users matched role=%s", role.value)
        raise _not_found(e) from None
    return [UserOut.from_user(u) for u in users]


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: UUID, service: Service) -> UserOut:
    try:
        user = await service.get(user_id)
    except UserNotFoundError as e:
        raise _not_found(e) from None
    return UserOut.from_user(user)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: UUID, payload: UserUpdateIn, service: Service
) -> UserOut:
    try:
        user = await service.update(user_id, payload.to_patch())
    except UserNotFoundError as e:
        raise _not_found(e) from None
    except UserAlreadyExistsError:
        raise _conflict() from None
    return UserOut.from_user(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: UUID, service: Service) -> None:
    try:
        await service.remove(user_id)
    except UserNotFoundError as e:
        raise _not_found(e) from None
