from typing import Optional

from pydantic import BaseModel, TypeAdapter, field_validator

BRANCH_REF_PREFIX = "refs/heads/"


class Repository(BaseModel):
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def null_name(cls, value):
        return "" if value is None else value


class PushEvent(BaseModel):
    ref: str = ""
    repository: Repository = Repository()
    # Other push fields (pusher, commits, ...) are ignored.

    @field_validator("ref", mode="before")
    @classmethod
    def null_ref(cls, value):
        return "" if value is None else value

    @field_validator("repository", mode="before")
    @classmethod
    def null_repository(cls, value):
        return {} if value is None else value

    @property
    def branch(self) -> str:
        return self.ref.removeprefix(BRANCH_REF_PREFIX)


_push_event_or_null = TypeAdapter(Optional[PushEvent])


def parse_push_event(body: bytes) -> PushEvent:
    """
    Decode a push event from a JSON body. A JSON `null` (for the whole body or
    any field) reads as the empty value. Raises pydantic.ValidationError
    for anything that is not JSON or does not have the push event's shape.
    """
    return _push_event_or_null.validate_json(body) or PushEvent()
