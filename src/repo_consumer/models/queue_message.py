from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Any


class RepositoryRef(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    id: int | None = None
    name: str | None = None
    # Producers send either snake_case or camelCase for this one
    full_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("full_name", "fullName"),
        serialization_alias="full_name",
    )
    url: str | None = None
    description: str | None = None


class Envelope(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    event: str
    message: str | None = None
    timestamp: str | None = None
    sender: str | None = None
    action: str | None = None  # only set for pull_request events
    repository: RepositoryRef | None = None

    def to_wire(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class RawMessage(BaseModel):
    """
    One delivery attempt as handed out by the queue. The receipt handle is
    the only way to acknowledge it; it changes on every redelivery.
    """
    model_config = ConfigDict(frozen=True)

    message_id: str
    receipt_handle: str
    body: str
    attributes: dict[str, str] = Field(default_factory=dict)
    message_attributes: dict[str, Any] = Field(default_factory=dict)

    @property
    def receive_count(self) -> int | None:
        value = self.attributes.get("ApproximateReceiveCount")
        return int(value) if value is not None else None
