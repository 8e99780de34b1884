from pydantic import BaseModel, ConfigDict, Field


class SubgraphInput(BaseModel):
    name: str
    sdl: str
    url: str | None = None


class CompositionRequest(BaseModel):
    services: list[SubgraphInput]


class SanitizedNode(BaseModel):
    kind: str | None = None
    name: str | None = None
    subgraph: str | None = None
    loc: tuple[int, int] | None = None  # [start, end] source offsets


class SanitizedError(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str
    errors: list["SanitizedError"] | None = None
    nodes: list[SanitizedNode] | None = None


SanitizedError.model_rebuild()  # necessary for recursive types


class SanitizedHint(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str | None = None
    code: str | None = None
    nodes: list[SanitizedNode] | None = None


class CompositionReport(BaseModel):
    sdl: str | None = None
    hints: list[SanitizedHint] | None = None
    errors: list[SanitizedError] = Field(default_factory=list)
