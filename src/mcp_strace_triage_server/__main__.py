"""Module entrypoint.

Allows:
    python -m mcp_strace_triage_server
"""

from __future__ import annotations

from mcp_strace_triage_server.server.trace_server import main

if __name__ == "__main__":
    main()
