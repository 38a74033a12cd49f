from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Any, List, Literal, Optional

from surface_prober.config import API_TYPES


class ProtoChainRecord(BaseModel):
    """
    One addressable API surface point, ex. ["HTMLInputElement", "indeterminate"].

    Classification fields stay None until the pipeline fills them in.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_type: str = Field(alias="apiType")
    type: str
    proto_chain: List[str] = Field(alias="protoChain", min_length=1)
    proto_chain_id: str = Field(default="", alias="protoChainId")

    is_supported: Optional[bool] = Field(default=None, alias="isSupported")
    ast_node_types: Optional[List[str]] = Field(default=None, alias="astNodeTypes")
    is_static: Optional[bool] = Field(default=None, alias="isStatic")

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # apiType i type sempre coincideixen
        api_type = data.get("apiType", data.get("api_type"))
        kind = data.get("type", api_type)
        data.setdefault("type", kind)
        if api_type is None:
            data["apiType"] = kind
        chain = data.get("protoChain", data.get("proto_chain"))
        if chain and not data.get("protoChainId") and not data.get("proto_chain_id"):
            data["protoChainId"] = ".".join(chain)
        return data

    @model_validator(mode="after")
    def _check_consistency(self):
        if self.type not in API_TYPES:
            raise ValueError(f'Invalid API type: "{self.type}"')
        if self.api_type != self.type:
            raise ValueError(f"apiType {self.api_type!r} does not match type {self.type!r}")
        if any(not segment for segment in self.proto_chain):
            raise ValueError(f"Empty segment in protoChain {self.proto_chain!r}")
        expected = ".".join(self.proto_chain)
        if self.proto_chain_id != expected:
            raise ValueError(
                f"protoChainId {self.proto_chain_id!r} is not the join of protoChain ({expected!r})"
            )
        return self

    @property
    def root(self) -> str:
        return self.proto_chain[0]

    @property
    def rest(self) -> List[str]:
        return self.proto_chain[1:]

    def to_output(self) -> dict:
        """Flat camelCase mapping handed to persistence."""
        data = self.model_dump(by_alias=True)
        data["astNodeType"] = data["astNodeTypes"]
        return data


class ProbeOutcome(BaseModel):
    """
    Envelope returned by every compiled probe.

      ok           -> Success(value)
      error        -> ExpectedFailure / UnexpectedFailure (decided per probe kind)
      inconsistent -> dataset casing bug, fatal
    """

    model_config = ConfigDict(frozen=True)

    id: str
    status: Literal["ok", "error", "inconsistent"]
    value: Any = None
    name: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "error"


class ShapeReport(BaseModel):
    """Raw value of a shape probe before the labels are decided."""

    model_config = ConfigDict(populate_by_name=True)

    member_only: bool = Field(default=False, alias="memberOnly")
    is_function: bool = Field(default=False, alias="isFunction")
    call: Optional[ProbeOutcome] = None
    construct_outcome: Optional[ProbeOutcome] = Field(default=None, alias="construct")


class CssSurface(BaseModel):
    properties: List[str] = []
    values: List[str] = []
