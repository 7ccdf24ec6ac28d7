"""Sequential execution of a task graph with skip-if-exists semantics."""

from __future__ import annotations

import enum
import inspect
from dataclasses import dataclass
from typing import Optional

from outtree.graph import node_name, resolve_execution_order
from outtree.logging import Logger, LogLevel, NullLogger
from outtree.nodes import Node, NodeKind, PrerequisiteNode, TaskNode, is_synthetic


class ExecutionError(Exception):
    """Base class for errors raised while running a node."""

    pass


class InvalidActionResultError(ExecutionError):
    """Raised when an action does not return an awaitable."""

    pass


class MissingPrerequisiteError(ExecutionError):
    """Raised when a prerequisite artifact does not exist."""

    def __init__(self, identity: str):
        super().__init__(f"Missing prerequisite: {identity}")
        self.identity = identity


@dataclass(frozen=True)
class ExecutionOptions:
    verbose: bool = False
    dryrun: bool = False

    @property
    def tracing(self) -> bool:
        return self.verbose or self.dryrun


class NodeState(enum.Enum):
    """Terminal success state of a node after a run."""

    SATISFIED = "satisfied"  # output already existed
    SUCCEEDED = "succeeded"  # action ran
    WOULD_RUN = "would_run"  # dry run, action skipped
    VERIFIED = "verified"    # prerequisite present


@dataclass
class NodeResult:
    identity: str
    state: NodeState


@dataclass
class NodeStatus:
    """Completion of one node's output, as reported by `check_status`."""

    identity: str
    complete: bool


class Executor:
    """Runs the nodes of a graph one at a time, dependencies first."""

    def __init__(self, logger: Optional[Logger] = None):
        """Initialize executor.

        Args:
            logger: Sink for trace lines. Defaults to discarding them.
        """
        self.logger = logger or NullLogger()

    def _trace(self, options: ExecutionOptions, verb: str, node: Node) -> None:
        if options.tracing:
            self.logger.step(verb, node_name(node))

    async def run(
        self, root: Node, options: ExecutionOptions = ExecutionOptions()
    ) -> list[NodeResult]:
        """Execute a node and everything it requires.

        Args:
            root: Node whose output should exist when the run finishes
            options: Verbose and dry-run switches, shared by every node

        Returns:
            One NodeResult per executed node, in execution order

        Raises:
            CycleError: If the graph contains a cycle (nothing runs)
            Exception: The first error raised by a node; later nodes don't run
        """
        order = [node for node in resolve_execution_order(root, self.logger) if not is_synthetic(node)]
        self.logger.debug(
            f"Execution order: {', '.join(node_name(n) for n in order) or '(empty)'}"
        )

        results = []
        for node in order:
            try:
                state = await self.run_node(node, options)
            except Exception as e:
                self.logger.step(
                    "failed", f"{node_name(node)} ({type(e).__name__}: {e})", level=LogLevel.ERROR
                )
                raise
            results.append(NodeResult(identity=node_name(node), state=state))

        return results

    async def run_node(self, node: Node, options: ExecutionOptions) -> NodeState:
        """Run a single node according to its kind.

        Raises:
            InvalidActionResultError: If a task action returns a non-awaitable
            MissingPrerequisiteError: If a prerequisite artifact is absent
        """
        match node.kind:
            case NodeKind.NULL:
                return NodeState.SATISFIED
            case NodeKind.PREREQUISITE:
                return await self._verify_prerequisite(node, options)
            case NodeKind.TASK:
                return await self._run_task(node, options)
            case _:
                raise TypeError(f"Unknown node kind: {node.kind!r}")

    async def _verify_prerequisite(
        self, node: PrerequisiteNode, options: ExecutionOptions
    ) -> NodeState:
        if await node.output.exists():
            self._trace(options, "exist", node)
            return NodeState.VERIFIED

        self._trace(options, "missing", node)
        raise MissingPrerequisiteError(node.output.identity)

    async def _run_task(self, node: TaskNode, options: ExecutionOptions) -> NodeState:
        if await node.output.exists():
            self._trace(options, "skip", node)
            return NodeState.SATISFIED

        if options.dryrun:
            self._trace(options, "would run", node)
            return NodeState.WOULD_RUN

        self._trace(options, "run", node)
        ran = node.action(node.output, node.inputs)
        if not inspect.isawaitable(ran):
            raise InvalidActionResultError(
                f"Action for '{node_name(node)}' must return an awaitable "
                f"but returned {ran!r}"
            )
        await ran
        return NodeState.SUCCEEDED

    async def check_status(self, root: Node) -> list[NodeStatus]:
        """Report whether each real node's output exists.

        Performs existence checks only: no action runs and nothing is written.

        Raises:
            CycleError: If the graph contains a cycle
        """
        statuses = []
        for node in resolve_execution_order(root, self.logger):
            if is_synthetic(node):
                continue
            statuses.append(
                NodeStatus(identity=node_name(node), complete=await node.output.exists())
            )
        return statuses
