from __future__ import annotations

from presence_chat.domain.entities.user import User
from presence_chat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        username=model.username,
        display_name=model.display_name,
        password_hash=model.password_hash,
        created_at=model.created_at,
    )


def entity_to_model(entity: User) -> UserModel:
    return UserModel(
        id=entity.id,
        username=entity.username,
        display_name=entity.display_name,
        password_hash=entity.password_hash,
        created_at=entity.created_at,
    )
