"""Artifact interface and the local file backend."""

from __future__ import annotations

import asyncio
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union


class Artifact(ABC):
    """Output location of a task.

    The engine only ever calls `exists()`. `read()` and `write()` are for use by
    task actions.
    """

    @property
    @abstractmethod
    def identity(self) -> str:
        """Human-readable name used in trace lines, errors and status reports."""

    @abstractmethod
    async def exists(self) -> bool:
        ...

    async def read(self):
        raise NotImplementedError(f"{type(self).__name__} does not support read()")

    async def write(self, data) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not support write()")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identity!r})"


class LocalFileArtifact(Artifact):
    """Artifact backed by a file on the local filesystem.

    Blocking filesystem calls are run in a worker thread so actions awaiting them
    don't stall the event loop.
    """

    def __init__(self, path: Union[str, os.PathLike]):
        self.path = Path(path)

    @property
    def identity(self) -> str:
        return str(self.path)

    async def exists(self) -> bool:
        return await asyncio.to_thread(self.path.exists)

    async def read(self) -> str:
        return await asyncio.to_thread(self.path.read_text)

    async def write(self, data: Union[str, bytes]) -> None:
        if isinstance(data, bytes):
            await asyncio.to_thread(self.path.write_bytes, data)
        else:
            await asyncio.to_thread(self.path.write_text, data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocalFileArtifact):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)


def create_local_file_target(path: Union[str, os.PathLike]) -> LocalFileArtifact:
    return LocalFileArtifact(path)
