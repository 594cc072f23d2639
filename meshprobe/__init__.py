"""
meshprobe - Convergence Harness for Service-Mesh Integration Tests

Drives a control-plane CLI and HTTP endpoints of a cluster under test and
checks that the system eventually reaches the expected state.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- Failures carry the real cause, never a generic timeout

Modules:
- process: One-shot command execution
- stream: Long-lived command output streaming
- retry: Retry-until-success convergence polling
- polling: HTTP GET polling
- stat: Stat table parsing
- events: Kubernetes event list parsing
"""

__version__ = "1.0.0"
