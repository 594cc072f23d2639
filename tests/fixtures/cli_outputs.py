"""
Canned CLI output for stat tables and event lists.

Scenarios map command patterns to the responses a converging cluster would
give, so tests can exercise polling without a real mesh.

Usage:
    def test_meshed(command_mocker):
        command_mocker.register_scenario("deployments_converging")
        # ... test code
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# Ensure tests directory is in path for imports
TESTS_DIR = Path(__file__).parent.parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from conftest import CommandResponse

# =============================================================================
# Stat Table Builders
# =============================================================================

STAT_HEADER = "NAME   MESHED   SUCCESS   RPS   LATENCY_P50   LATENCY_P95   LATENCY_P99   TCP_CONN"
STAT_HEADER_WITH_STATUS = (
    "NAME   STATUS   MESHED   SUCCESS   RPS   LATENCY_P50   LATENCY_P95   LATENCY_P99   TCP_CONN"
)


def stat_line(
    name: str,
    meshed: str = "1/1",
    success: str = "100.00%",
    rps: str = "2.0rps",
    p50: str = "1ms",
    p95: str = "2ms",
    p99: str = "3ms",
    tcp: str = "2",
    status: Optional[str] = None,
) -> str:
    """Generate one aligned stat row."""
    fields = [name]
    if status is not None:
        fields.append(status)
    fields += [meshed, success, rps, p50, p95, p99, tcp]
    return "   ".join(fields)


def stat_output(lines: List[str], with_status: bool = False) -> str:
    """Generate a full stat table with header and trailing newline."""
    header = STAT_HEADER_WITH_STATUS if with_status else STAT_HEADER
    return "\n".join([header] + lines) + "\n"


# =============================================================================
# Event Builders
# =============================================================================

def event_item(
    name: str,
    reason: str,
    message: str,
    event_type: str = "Normal",
    kind: str = "Pod",
    namespace: str = "linkerd",
    count: int = 1,
) -> Dict[str, Any]:
    """Generate one core/v1 Event object."""
    return {
        "apiVersion": "v1",
        "kind": "Event",
        "metadata": {
            "name": f"{name}.16a2b3c4d5e6f7a8",
            "namespace": namespace,
            "uid": f"uid-{name}",
            "resourceVersion": "1234",
            "creationTimestamp": "2024-01-01T00:00:00Z",
        },
        "involvedObject": {
            "kind": kind,
            "namespace": namespace,
            "name": name,
            "apiVersion": "v1",
            "fieldPath": "spec.containers{linkerd-proxy}",
        },
        "reason": reason,
        "message": message,
        "source": {"component": "kubelet", "host": "kind-control-plane"},
        "firstTimestamp": "2024-01-01T00:00:00Z",
        "lastTimestamp": "2024-01-01T00:01:00Z",
        "count": count,
        "type": event_type,
    }


def event_list(items: List[Dict[str, Any]]) -> str:
    """Wrap items in a core/v1 List document."""
    return json.dumps({
        "apiVersion": "v1",
        "kind": "List",
        "items": items,
        "metadata": {"resourceVersion": ""},
    })


# =============================================================================
# Common Outputs
# =============================================================================

CONTROL_PLANE_STAT = stat_output([
    stat_line("linkerd-controller", meshed="1/1", rps="1.2rps"),
    stat_line("linkerd-destination", meshed="1/1", rps="3.4rps"),
    stat_line("linkerd-identity", meshed="1/1", rps="0.5rps", tcp="4"),
])

CONTROL_PLANE_STAT_NOT_READY = stat_output([
    stat_line("linkerd-controller", meshed="0/1", success="-", rps="-", p50="-", p95="-", p99="-", tcp="-"),
    stat_line("linkerd-destination", meshed="1/1", rps="3.4rps"),
    stat_line("linkerd-identity", meshed="1/1", rps="0.5rps", tcp="4"),
])

POD_STAT_WITH_STATUS = stat_output([
    stat_line("web-5d4f6c8b9-abcde", status="Running", rps="4.1rps"),
    stat_line("emoji-7b8c9d0e1-fghij", status="Running", rps="2.0rps"),
], with_status=True)

PROXY_INJECTED_EVENTS = event_list([
    event_item("web-5d4f6c8b9-abcde", "Injected", "Linkerd sidecar proxy injected"),
    event_item("web-5d4f6c8b9-abcde", "Started", "Started container linkerd-proxy"),
])


# =============================================================================
# Scenario: Control Plane Converging
# =============================================================================

DEPLOYMENTS_CONVERGING = {
    "stat deploy": [
        CommandResponse(stderr="Error: no pods to report", returncode=1),
        CommandResponse(stdout=CONTROL_PLANE_STAT_NOT_READY),
        CommandResponse(stdout=CONTROL_PLANE_STAT),
    ],
}


# =============================================================================
# Scenario: Healthy Mesh (Control Case)
# =============================================================================

HEALTHY_MESH = {
    "stat deploy": CommandResponse(stdout=CONTROL_PLANE_STAT),
    "stat pods": CommandResponse(stdout=POD_STAT_WITH_STATUS),
}


# =============================================================================
# Scenario: Control Plane Never Ready
# =============================================================================

NEVER_READY = {
    "stat deploy": CommandResponse(
        stderr="Error: the server could not find the requested resource",
        returncode=1,
    ),
}


# =============================================================================
# Master Scenario Registry
# =============================================================================

SCENARIOS = {
    "deployments_converging": DEPLOYMENTS_CONVERGING,
    "healthy": HEALTHY_MESH,
    "never_ready": NEVER_READY,
}


def get_scenario_names() -> list:
    """Get list of all available scenario names."""
    return list(SCENARIOS.keys())
