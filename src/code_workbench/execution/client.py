from __future__ import annotations

from typing import Protocol

from ..outcomes import TransportError
from .types import ExecutionRequest, ExecutionResponse


class ExecutionClient(Protocol):
    def execute(self, request: ExecutionRequest) -> ExecutionResponse | TransportError:
        """Submit one request and return the parsed body or a transport error.

        Example:
            ```python
            response = client.execute(ExecutionRequest("python", "3.10.0", "print(1)"))
            ```
        """
        ...
