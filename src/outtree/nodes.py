"""Node kinds of a task graph and their construction helpers."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, ClassVar, Sequence, Union

from outtree.artifact import Artifact, LocalFileArtifact

Action = Callable[[Artifact, tuple[Artifact, ...]], Awaitable[Any]]


class TaskDefinitionError(ValueError):
    """Raised when a task is constructed with missing pieces."""

    pass


class MissingOutputError(TaskDefinitionError):
    """Raised when a task is created without an output."""

    pass


class MissingActionError(TaskDefinitionError):
    """Raised when a task is created without a run function."""

    pass


class NodeKind(enum.Enum):
    TASK = "task"
    NULL = "null"
    PREREQUISITE = "prerequisite"


class _AlwaysExists(Artifact):
    """Output of the null node."""

    @property
    def identity(self) -> str:
        return "<null>"

    async def exists(self) -> bool:
        return True


@dataclass(eq=False)
class TaskNode:
    """A unit of work producing exactly one artifact.

    Nodes compare by identity: two nodes with the same output are still two
    distinct vertices of the graph.
    """

    output: Artifact
    action: Action
    requires: tuple[Node, ...] = ()
    kind: ClassVar[NodeKind] = NodeKind.TASK

    @property
    def inputs(self) -> tuple[Artifact, ...]:
        """Outputs of the required nodes, in `requires` order."""
        return tuple(r.output for r in self.requires)


@dataclass(eq=False)
class PrerequisiteNode:
    """Verifies that an externally produced artifact exists. Never writes."""

    output: Artifact
    requires: tuple[Node, ...] = field(default=(), init=False)
    kind: ClassVar[NodeKind] = NodeKind.PREREQUISITE


@dataclass(eq=False)
class NullNode:
    """Stand-in dependency for nodes that require nothing."""

    output: Artifact = field(default_factory=_AlwaysExists)
    requires: tuple[Node, ...] = field(default=(), init=False)
    kind: ClassVar[NodeKind] = NodeKind.NULL


Node = Union[TaskNode, PrerequisiteNode, NullNode]

NULL_NODE = NullNode()

# Node kinds a caller may list in `requires`
_REQUIRABLE = (TaskNode, PrerequisiteNode)

Requires = Union[TaskNode, PrerequisiteNode, Sequence[Union[TaskNode, PrerequisiteNode]]]


def is_synthetic(node: Node) -> bool:
    return node.kind is NodeKind.NULL


def _coerce_output(output: Union[Artifact, str, os.PathLike, None]) -> Artifact:
    if output is None or output == "":
        raise MissingOutputError("No output given")
    if isinstance(output, Artifact):
        return output
    if isinstance(output, (str, os.PathLike)):
        return LocalFileArtifact(output)
    raise TypeError(
        f"output must be an Artifact or a path, not {type(output).__name__}"
    )


def _normalize_requires(requires: Requires | None) -> tuple[Node, ...]:
    """Turn a single node or a sequence of nodes into a tuple of nodes.

    Raises:
        TypeError: If `requires` or any of its entries is not a task node
    """
    if requires is None:
        return ()
    if isinstance(requires, _REQUIRABLE):
        return (requires,)
    if isinstance(requires, (list, tuple)):
        for index, item in enumerate(requires):
            if not isinstance(item, _REQUIRABLE):
                raise TypeError(
                    f"requires[{index}] must be a task node, not {type(item).__name__}"
                )
        return tuple(requires)
    raise TypeError(
        f"requires must be a task node or a list of task nodes, "
        f"not {type(requires).__name__}"
    )


def create_task(
    output: Union[Artifact, str, os.PathLike, None] = None,
    requires: Requires | None = None,
    run: Action | None = None,
) -> TaskNode:
    """Create a task node.

    Args:
        output: Artifact the task produces, or a path for a local file
        requires: A node or a list of nodes that must be satisfied first
        run: Coroutine function called as ``run(output, inputs)`` when the
            output does not exist yet

    Returns:
        The new TaskNode

    Raises:
        MissingOutputError: If no output is given
        MissingActionError: If no run function is given
        TypeError: If any argument has the wrong shape
    """
    artifact = _coerce_output(output)
    if run is None:
        raise MissingActionError("No run function given")
    if not callable(run):
        raise TypeError(f"run must be callable, not {type(run).__name__}")

    return TaskNode(output=artifact, action=run, requires=_normalize_requires(requires))


def create_prerequisite_task(
    path_or_artifact: Union[Artifact, str, os.PathLike, None],
) -> PrerequisiteNode:
    """Create a node that only checks an externally produced artifact exists."""
    return PrerequisiteNode(output=_coerce_output(path_or_artifact))
