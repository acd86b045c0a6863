from .client import ExecutionClient
from .http_client import HttpExecutionClient, build_payload
from .types import ExecutionRequest, ExecutionResponse

__all__ = [
    "ExecutionClient",
    "ExecutionRequest",
    "ExecutionResponse",
    "HttpExecutionClient",
    "build_payload",
]
