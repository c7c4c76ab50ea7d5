from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PresenceUserResponse(BaseModel):
    id: str
    name: str
    connections: int
    last_seen: int | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PresenceResponse(BaseModel):
    online: list[PresenceUserResponse]
    connections: int
