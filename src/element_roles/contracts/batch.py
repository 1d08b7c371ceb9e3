"""Request contract for creating a batch device operation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from element_roles.schema.serialization import JSONValue


class OperationType(StrEnum):
    INVOKE_COMMAND = "InvokeCommand"


def _validate_non_empty_str(value: object, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    parsed = value.strip()
    if not parsed:
        raise ValueError(f"{field_name} cannot be empty")
    return parsed


def _as_string_mapping(value: object, field_name: str) -> Mapping[str, str]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{field_name} must be a mapping")
    output: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise ValueError(f"{field_name} keys and values must be strings")
        output[key] = item
    return MappingProxyType(output)


def _as_operation_type(value: OperationType | str) -> OperationType:
    if isinstance(value, OperationType):
        return value
    try:
        return OperationType(value)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in OperationType)
        raise ValueError(f"invalid operation type {value!r}; expected one of: {allowed}") from exc


@dataclass(frozen=True, slots=True)
class BatchOperationCreateRequest:
    """Information needed to create a batch operation across many devices."""

    token: str
    operation_type: OperationType
    parameters: Mapping[str, str] = field(default_factory=dict)
    hardware_ids: tuple[str, ...] = field(default_factory=tuple)
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "token", _validate_non_empty_str(self.token, "BatchOperationCreateRequest.token")
        )
        object.__setattr__(self, "operation_type", _as_operation_type(self.operation_type))
        object.__setattr__(
            self,
            "parameters",
            _as_string_mapping(self.parameters, "BatchOperationCreateRequest.parameters"),
        )
        object.__setattr__(
            self,
            "metadata",
            _as_string_mapping(self.metadata, "BatchOperationCreateRequest.metadata"),
        )
        if isinstance(self.hardware_ids, str) or not isinstance(self.hardware_ids, Sequence):
            raise ValueError("BatchOperationCreateRequest.hardware_ids must be a sequence")
        object.__setattr__(
            self,
            "hardware_ids",
            tuple(
                _validate_non_empty_str(item, "BatchOperationCreateRequest.hardware_ids")
                for item in self.hardware_ids
            ),
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> BatchOperationCreateRequest:
        allowed_fields = {"token", "operationType", "parameters", "hardwareIds", "metadata"}
        unknown = sorted(key for key in payload if key not in allowed_fields)
        if unknown:
            raise ValueError(f"unsupported batch operation fields: {unknown}")
        hardware_ids = payload.get("hardwareIds", ())
        if isinstance(hardware_ids, str) or not isinstance(hardware_ids, Sequence):
            raise ValueError("hardwareIds must be an array of strings")
        return cls(
            token=payload.get("token"),  # type: ignore[arg-type]
            operation_type=payload.get("operationType"),  # type: ignore[arg-type]
            parameters=payload.get("parameters") or {},  # type: ignore[arg-type]
            hardware_ids=tuple(hardware_ids),  # type: ignore[arg-type]
            metadata=payload.get("metadata") or {},  # type: ignore[arg-type]
        )

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "token": self.token,
            "operationType": self.operation_type.value,
            "parameters": dict(self.parameters),
            "hardwareIds": list(self.hardware_ids),
            "metadata": dict(self.metadata),
        }


__all__ = ["BatchOperationCreateRequest", "OperationType"]
