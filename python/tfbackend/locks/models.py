"""
Lock record model.

Field names on the wire are exactly the ones Terraform's http backend sends:
ID, Operation, Info, Who, Version, Created and Path, all strings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LockInfo(BaseModel):
    """
    Metadata describing who holds a lock on a resource path.

    Missing or null fields become empty strings and unknown fields are
    ignored, so clients that send extra metadata still decode.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field("", alias="ID", description="Caller-chosen lock identity")
    operation: str = Field("", alias="Operation")
    info: str = Field("", alias="Info")
    who: str = Field("", alias="Who", description="user@host of the holder")
    version: str = Field("", alias="Version", description="Client tool version")
    created: str = Field("", alias="Created")
    path: str = Field("", alias="Path")

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, value):
        return "" if value is None else value

    def to_json(self) -> bytes:
        """Compact JSON using the wire field names."""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes) -> "LockInfo":
        return cls.model_validate_json(data)
