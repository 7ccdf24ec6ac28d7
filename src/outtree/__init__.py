"""outtree - a minimal incremental task-dependency build engine."""

__version__ = "0.1.0"

import asyncio
from typing import Optional

from outtree.artifact import Artifact, LocalFileArtifact, create_local_file_target
from outtree.executor import (
    ExecutionError,
    ExecutionOptions,
    Executor,
    InvalidActionResultError,
    MissingPrerequisiteError,
    NodeResult,
    NodeState,
    NodeStatus,
)
from outtree.graph import CycleError, DependencyGraph, build_dependency_tree, resolve_execution_order
from outtree.logging import Logger, LogLevel, NullLogger
from outtree.nodes import (
    NULL_NODE,
    MissingActionError,
    MissingOutputError,
    Node,
    NodeKind,
    NullNode,
    PrerequisiteNode,
    TaskDefinitionError,
    TaskNode,
    create_prerequisite_task,
    create_task,
)


async def run(
    root: Node,
    verbose: bool = False,
    dryrun: bool = False,
    logger: Optional[Logger] = None,
) -> list[NodeResult]:
    """Build `root`, running only the tasks whose output is missing."""
    options = ExecutionOptions(verbose=verbose, dryrun=dryrun)
    return await Executor(logger).run(root, options)


def run_sync(
    root: Node,
    verbose: bool = False,
    dryrun: bool = False,
    logger: Optional[Logger] = None,
) -> list[NodeResult]:
    """Blocking wrapper around `run` for callers without an event loop."""
    return asyncio.run(run(root, verbose=verbose, dryrun=dryrun, logger=logger))


async def check_status(root: Node, logger: Optional[Logger] = None) -> list[NodeStatus]:
    """Report which outputs in `root`'s graph already exist."""
    return await Executor(logger).check_status(root)


__all__ = [
    "__version__",
    "run",
    "run_sync",
    "check_status",
    "Artifact",
    "LocalFileArtifact",
    "create_local_file_target",
    "ExecutionError",
    "ExecutionOptions",
    "Executor",
    "InvalidActionResultError",
    "MissingPrerequisiteError",
    "NodeResult",
    "NodeState",
    "NodeStatus",
    "CycleError",
    "DependencyGraph",
    "build_dependency_tree",
    "resolve_execution_order",
    "Logger",
    "LogLevel",
    "NullLogger",
    "NULL_NODE",
    "MissingActionError",
    "MissingOutputError",
    "Node",
    "NodeKind",
    "NullNode",
    "PrerequisiteNode",
    "TaskDefinitionError",
    "TaskNode",
    "create_prerequisite_task",
    "create_task",
]
