from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

ParamType = Literal["string", "integer", "number", "boolean", "array", "object"]


class ParameterSpec(BaseModel):
    """One named argument of a tool; order inside a descriptor is the call order."""

    name: str
    type: ParamType
    description: str = ""
    required: bool = False
    default: Any = None
    items: Optional[ParamType] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    def json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.type == "array":
            schema["items"] = {"type": self.items or "string"}
        if self.default is not None:
            schema["default"] = self.default
        return schema


class ToolDescriptor(BaseModel):
    name: str
    description: str
    parameters: Tuple[ParameterSpec, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    @property
    def required_parameters(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters if p.required)

    def parameter(self, name: str) -> Optional[ParameterSpec]:
        for spec in self.parameters:
            if spec.name == name:
                return spec
        return None

    def input_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
        }
        if self.required_parameters:
            schema["required"] = list(self.required_parameters)
        return schema

    def to_catalog_entry(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }

    def to_openai_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.input_schema(),
            },
        }


class InvocationRequest(BaseModel):
    tool: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)

    model_config = ConfigDict(extra="ignore")


class ChatReply(BaseModel):
    result: Optional[str] = None
    tool_used: Optional[str] = None
    raw_result: Any = None


__all__ = [
    "ChatReply",
    "ChatRequest",
    "InvocationRequest",
    "ParamType",
    "ParameterSpec",
    "ToolDescriptor",
]
