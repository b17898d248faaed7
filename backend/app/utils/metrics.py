"""StatsD counters and timings over UDP.

Fire-and-forget: a missing or unreachable sink never affects a request.

  from app.utils.metrics import incr, timing_ms
  incr("inquiry.created", tags={"source": "quick_form"})
  timing_ms("http.request", 42.5, tags={"route": "/api/v1/artists"})

Env:
  METRICS_STATSD_ADDR = "host:port" (unset disables the sink)
  METRICS_TAGS = "0" drops the Datadog-style ``|#key:val`` suffix
"""

from __future__ import annotations

import logging
import os
import socket
from typing import Dict, Optional

logger = logging.getLogger(__name__)

_ADDR = os.getenv("METRICS_STATSD_ADDR", "").strip()
_USE_TAGS = os.getenv("METRICS_TAGS", "1") not in ("0", "false", "False")
_SOCK: Optional[socket.socket] = None


def _get_sock() -> Optional[socket.socket]:
    global _SOCK
    if not _ADDR:
        return None
    if _SOCK is None:
        try:
            host, port = _ADDR.rsplit(":", 1)
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            sock.connect((host, int(port)))
            _SOCK = sock
        except (OSError, ValueError) as exc:
            logger.warning("StatsD sink %s unusable: %s", _ADDR, exc)
            return None
    return _SOCK


def format_line(name: str, value: str, kind: str, tags: Optional[Dict[str, object]] = None) -> str:
    line = f"{name}:{value}|{kind}"
    if tags and _USE_TAGS:
        pairs = [f"{str(k).replace(',', '_')}:{str(v).replace(',', '_')}" for k, v in tags.items()]
        line += "|#" + ",".join(pairs)
    return line


def _send(line: str) -> None:
    sock = _get_sock()
    if sock is None:
        return
    try:
        sock.send(line.encode("utf-8"))
    except OSError:
        # UDP send failures are not actionable per request
        pass


def incr(name: str, value: int = 1, tags: Optional[Dict[str, object]] = None) -> None:
    _send(format_line(name, str(int(value)), "c", tags))


def timing_ms(name: str, ms: float, tags: Optional[Dict[str, object]] = None) -> None:
    _send(format_line(name, f"{float(ms):.2f}", "ms", tags))
