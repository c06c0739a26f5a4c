# =============================================================================
# Query Specification Model
# =============================================================================
# Parameterised filter documents for the source and destination containers.
# =============================================================================

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

__all__ = ["QuerySpec"]


class QuerySpec(BaseModel):
    """
    Query against a document container.

    The filter is a MongoDB filter document. Any string leaf that exactly
    matches a parameter name (by convention prefixed with "@") is replaced by
    the parameter value when the spec is resolved, so caller-supplied values
    never have to be spliced into query text.

    Attributes:
        filter: Filter document (the query "text")
        parameters: Named parameter values, e.g. {"@id": "d1"}
        projection: Optional projection document

    Example:
        >>> spec = QuerySpec(filter={"id": "@id"}, parameters={"@id": "d1"})
        >>> spec.resolve()
        {'id': 'd1'}
    """

    filter: Dict[str, Any] = Field(default_factory=dict, description="Filter document")
    parameters: Dict[str, Any] = Field(
        default_factory=dict,
        description="Named parameters substituted into string leaves of the filter",
    )
    projection: Optional[Dict[str, Any]] = Field(None, description="Optional projection")

    @field_validator("parameters")
    @classmethod
    def validate_parameter_names(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Parameter names must start with '@'."""
        for name in v:
            if not name.startswith("@"):
                raise ValueError(f"Parameter name must start with '@': {name!r}")
        return v

    def resolve(self) -> Dict[str, Any]:
        """Return the filter with every parameter reference substituted."""
        return self._substitute(self.filter)

    def _substitute(self, value: Any) -> Any:
        if isinstance(value, str) and value in self.parameters:
            return self.parameters[value]
        if isinstance(value, dict):
            return {key: self._substitute(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._substitute(item) for item in value]
        return value

    def describe(self) -> str:
        """Human-readable rendering used in run banners."""
        if not self.parameters:
            return str(self.filter)
        return f"{self.filter} with {self.parameters}"
