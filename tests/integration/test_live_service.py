import os

import pytest

from code_workbench import HttpExecutionClient, Workbench
from code_workbench.languages import find_by_exact_name
from code_workbench.outcomes import CompileFailure, Success
from code_workbench.session import MemoryBackend, SessionStore


def _service_url() -> str | None:
    return os.getenv("CODE_WORKBENCH_INTEGRATION_URL")


pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(_service_url() is None, reason="Live execution service not configured"),
]


@pytest.fixture
def client():
    wire_format = os.getenv("CODE_WORKBENCH_INTEGRATION_FORMAT", "gateway")
    with HttpExecutionClient(str(_service_url()), wire_format=wire_format) as live:
        yield live


def test_python_round_trip(client: HttpExecutionClient) -> None:
    bench = Workbench("integration", client=client, store=SessionStore(MemoryBackend()))
    bench.set_code("a, b = map(int, input().split())\nprint(a * b)\n")
    bench.set_input("6 7")

    outcome = bench.run()

    assert isinstance(outcome, Success)
    assert outcome.stdout.strip() == "42"


def test_cpp_compile_error(client: HttpExecutionClient) -> None:
    bench = Workbench(
        "integration",
        client=client,
        store=SessionStore(MemoryBackend()),
        language=find_by_exact_name("C++"),
    )
    bench.set_code("int main() { return undefined_name; }\n")

    assert isinstance(bench.run(), CompileFailure)
