"""
ResourceGraph: the compiled template, keyed by logical ID.

The graph is immutable. ``merge`` returns a new graph, so the compiler can
thread one value through each function's compilation step without any
shared mutable state.
"""

from typing import Iterator, TypeVar

from pydantic import BaseModel, Field

from fcdeploy.errors import CompilationError
from fcdeploy.resources.models import BaseResource, Resource

R = TypeVar("R", bound=BaseResource)


class ResourceGraph(BaseModel):
    """
    Mapping of logical ID to resource description.

    Insertion order is preserved and is meaningful: the deployment engine
    creates functions, APIs and triggers in the order they were compiled.

    Example:
        graph = ResourceGraph()
        graph = graph.merge("sls-api-group", api_group)
        graph.get("sls-api-group")
    """

    resources: dict[str, Resource] = Field(default_factory=dict)

    class Config:
        frozen = True

    def merge(self, logical_id: str, resource: BaseResource) -> "ResourceGraph":
        """
        Return a new graph with ``resource`` merged in under ``logical_id``.

        Raises:
            CompilationError: If a resource of a different kind already
                holds ``logical_id``
        """
        resources = dict(self.resources)
        existing = resources.get(logical_id)

        if existing is None:
            resources[logical_id] = resource
        elif existing.kind != resource.kind:
            raise CompilationError(
                f"Logical ID '{logical_id}' is already used by a {existing.kind} "
                f"resource, cannot merge a {resource.kind} into it"
            )
        else:
            resources[logical_id] = existing.merge(resource)

        return ResourceGraph(resources=resources)

    def get(self, logical_id: str) -> BaseResource | None:
        return self.resources.get(logical_id)

    def of_kind(self, resource_type: type[R]) -> list[R]:
        """All resources of one kind, in insertion order."""
        return [r for r in self.resources.values() if isinstance(r, resource_type)]

    def logical_ids(self) -> list[str]:
        return list(self.resources)

    def items(self) -> Iterator[tuple[str, BaseResource]]:
        return iter(self.resources.items())

    def __contains__(self, logical_id: object) -> bool:
        return logical_id in self.resources

    def __len__(self) -> int:
        return len(self.resources)

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize the graph as a JSON template."""
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> "ResourceGraph":
        """Load a graph written by ``to_json``."""
        return cls.model_validate_json(data)

    def summary(self) -> dict[str, int]:
        """Count resources by kind."""
        counts: dict[str, int] = {}
        for resource in self.resources.values():
            counts[resource.kind] = counts.get(resource.kind, 0) + 1
        return counts

    def __repr__(self) -> str:
        return f"ResourceGraph(resources={len(self.resources)})"
