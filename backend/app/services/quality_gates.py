"""Quality gates run before a release.

Gates are grouped in phases. The gates of one phase run concurrently;
phases run in order and the run stops after a phase in which a required
gate failed. Most gates shell out to an external tool::

    python -m app.services.quality_gates --phase development
    python -m app.services.quality_gates --json
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import re
import sys
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from ..utils.json import dumps

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]

PHASES = ("pre-implementation", "development", "integration", "production-readiness")

PASSED = "passed"
FAILED = "failed"
WARNING = "warning"
SKIPPED = "skipped"

OUTPUT_TAIL_LINES = 20


@dataclass
class QualityGate:
    name: str
    phase: str
    automated: bool
    required: bool
    tools: List[str] = field(default_factory=list)
    timeout: float = 60
    retries: int = 0


@dataclass
class GateResult:
    name: str
    phase: str
    status: str
    duration_ms: float
    details: List[str] = field(default_factory=list)
    metrics: Dict[str, float] = field(default_factory=dict)


@dataclass
class CommandOutcome:
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def tail(self, lines: int = OUTPUT_TAIL_LINES) -> List[str]:
        return [line for line in self.output.strip().splitlines()[-lines:] if line.strip()]


@dataclass
class RunReport:
    results: List[GateResult]
    duration_ms: float

    @property
    def success(self) -> bool:
        return not any(r.status == FAILED for r in self.results)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "duration_ms": self.duration_ms,
            "results": [asdict(r) for r in self.results],
        }


CommandRunner = Callable[[Sequence[str], float, Path], Awaitable[CommandOutcome]]
CheckOutcome = Tuple[str, List[str], Dict[str, float]]
Checker = Callable[["QualityGateRunner", QualityGate], Awaitable[CheckOutcome]]


async def run_command(argv: Sequence[str], timeout: float, cwd: Path) -> CommandOutcome:
    """Run ``argv`` in ``cwd`` and capture combined output.

    Raises ``asyncio.TimeoutError`` after killing the process when it
    outlives ``timeout`` seconds.
    """
    proc = await asyncio.create_subprocess_exec(
        *argv,
        cwd=str(cwd),
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        out, _ = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise
    return CommandOutcome(proc.returncode or 0, out.decode("utf-8", errors="replace"))


# ─── checkers ─────────────────────────────────────────────────────────────


def command_check(argv: Sequence[str], ok_message: str, fail_message: str) -> Checker:
    async def check(runner: "QualityGateRunner", gate: QualityGate) -> CheckOutcome:
        outcome = await runner.run_tool(gate, argv)
        if outcome.ok:
            return PASSED, [ok_message], {}
        return FAILED, [fail_message] + outcome.tail(), {}

    return check


_PYTEST_SUMMARY_RE = re.compile(r"(\d+) (passed|failed|error|errors|skipped)")


async def check_tests(runner: "QualityGateRunner", gate: QualityGate) -> CheckOutcome:
    outcome = await runner.run_tool(gate, [sys.executable, "-m", "pytest", "-q"])
    counts: Dict[str, float] = {}
    for number, label in _PYTEST_SUMMARY_RE.findall(outcome.output):
        key = "errors" if label.startswith("error") else label
        counts[key] = counts.get(key, 0) + int(number)
    if outcome.ok:
        return PASSED, [f"{int(counts.get('passed', 0))} tests passed"], counts
    return FAILED, ["Tests failing"] + outcome.tail(), counts


async def check_api_schema(runner: "QualityGateRunner", gate: QualityGate) -> CheckOutcome:
    def build() -> dict:
        from app.main import app

        return app.openapi()

    schema = await asyncio.wait_for(asyncio.to_thread(build), gate.timeout)
    paths = schema.get("paths") or {}
    if not paths:
        return FAILED, ["OpenAPI schema has no paths"], {}
    return PASSED, [f"OpenAPI schema generated ({len(paths)} paths)"], {"paths": float(len(paths))}


REQUIRED_DOCS = ("README.md", "DESIGN.md")


async def check_documentation(runner: "QualityGateRunner", gate: QualityGate) -> CheckOutcome:
    missing = [name for name in REQUIRED_DOCS if not (runner.root / name).is_file()]
    if missing:
        return FAILED, [f"Missing {name}" for name in missing], {}
    return PASSED, ["Documentation present"], {}


DEFAULT_GATES: List[QualityGate] = [
    QualityGate("dependency-compatibility", "pre-implementation", True, True, ["pip"]),
    QualityGate("security-audit", "pre-implementation", True, True, ["pip-audit"], timeout=120, retries=1),
    QualityGate("architecture-review", "pre-implementation", False, True),
    QualityGate("type-check", "development", True, False, ["mypy"], timeout=180),
    QualityGate("tdd-compliance", "development", True, True, ["pytest"], timeout=300),
    QualityGate("lint", "development", True, True, ["ruff"]),
    QualityGate("migration-check", "integration", True, True, ["alembic"]),
    QualityGate("api-schema", "integration", True, True),
    QualityGate("load-smoke", "production-readiness", True, False, ["locust"], timeout=120),
    QualityGate("documentation-completeness", "production-readiness", True, True),
    QualityGate("rollback-validation", "production-readiness", False, True),
]

DEFAULT_CHECKERS: Dict[str, Checker] = {
    "dependency-compatibility": command_check(
        [sys.executable, "-m", "pip", "check"],
        "Installed dependencies are compatible",
        "Dependency conflicts detected",
    ),
    "security-audit": command_check(
        ["pip-audit"],
        "No known vulnerabilities",
        "Vulnerable dependencies detected",
    ),
    "type-check": command_check(
        ["mypy", "backend/app"],
        "Type check passed",
        "Type errors detected",
    ),
    "tdd-compliance": check_tests,
    "lint": command_check(["ruff", "check", "backend"], "Lint passed", "Lint errors detected"),
    "migration-check": command_check(
        ["alembic", "-c", "backend/alembic.ini", "check"],
        "Models match the latest migration",
        "Models and migrations diverge",
    ),
    "api-schema": check_api_schema,
    "load-smoke": command_check(
        [
            "locust", "-f", "load/locustfile.py", "--headless",
            "-u", "5", "-r", "5", "-t", "10s", "--only-summary",
        ],
        "Load smoke test passed",
        "Load smoke test failed",
    ),
    "documentation-completeness": check_documentation,
}


# ─── runner ───────────────────────────────────────────────────────────────


class QualityGateRunner:
    def __init__(
        self,
        gates: Optional[Sequence[QualityGate]] = None,
        checkers: Optional[Dict[str, Checker]] = None,
        root: Path = PROJECT_ROOT,
        command_runner: CommandRunner = run_command,
    ) -> None:
        self.gates = list(DEFAULT_GATES if gates is None else gates)
        self.checkers = dict(DEFAULT_CHECKERS if checkers is None else checkers)
        self.root = root
        self.command_runner = command_runner

    async def run_tool(self, gate: QualityGate, argv: Sequence[str]) -> CommandOutcome:
        """Run an external tool, retrying failures up to ``gate.retries`` times."""
        outcome = CommandOutcome(-1, "")
        for attempt in range(gate.retries + 1):
            try:
                outcome = await self.command_runner(argv, gate.timeout, self.root)
            except asyncio.TimeoutError:
                outcome = CommandOutcome(-1, f"{argv[0]} timed out after {gate.timeout}s")
            except FileNotFoundError:
                outcome = CommandOutcome(127, f"{argv[0]} is not installed")
            if outcome.ok:
                break
            logger.info("Gate %s attempt %d failed (exit %s)", gate.name, attempt + 1, outcome.returncode)
        return outcome

    async def run_gate(self, gate: QualityGate) -> GateResult:
        start = time.perf_counter()
        if not gate.automated:
            status, details, metrics = WARNING, ["Manual verification required"], {}
        elif gate.name not in self.checkers:
            status, details, metrics = SKIPPED, ["No checker registered"], {}
        else:
            try:
                status, details, metrics = await self.checkers[gate.name](self, gate)
            except Exception as exc:
                logger.exception("Gate %s raised", gate.name)
                status, details, metrics = FAILED, [f"Gate execution failed: {exc}"], {}
        duration = round((time.perf_counter() - start) * 1000, 1)
        return GateResult(gate.name, gate.phase, status, duration, details, metrics)

    async def run_phase(self, phase: str) -> List[GateResult]:
        gates = [g for g in self.gates if g.phase == phase]
        logger.info("Running %s gates (%d)", phase, len(gates))
        return list(await asyncio.gather(*(self.run_gate(g) for g in gates)))

    def _required_failed(self, results: Sequence[GateResult]) -> bool:
        required = {g.name for g in self.gates if g.required}
        return any(r.status == FAILED and r.name in required for r in results)

    async def run_all(self) -> RunReport:
        start = time.perf_counter()
        results: List[GateResult] = []
        for phase in PHASES:
            phase_results = await self.run_phase(phase)
            results.extend(phase_results)
            if self._required_failed(phase_results):
                logger.warning("Stopping after %s: a required gate failed", phase)
                break
        return RunReport(results, round((time.perf_counter() - start) * 1000, 1))

    async def run(self, phase: Optional[str] = None) -> RunReport:
        if phase is None:
            return await self.run_all()
        start = time.perf_counter()
        results = await self.run_phase(phase)
        return RunReport(results, round((time.perf_counter() - start) * 1000, 1))


STATUS_MARKS = {PASSED: "ok", FAILED: "FAIL", WARNING: "warn", SKIPPED: "skip"}


def format_report(report: RunReport) -> str:
    lines = []
    for r in report.results:
        lines.append(f"[{STATUS_MARKS[r.status]:>4}] {r.phase} / {r.name} ({r.duration_ms:.0f} ms)")
        lines.extend(f"       {d}" for d in r.details)
    lines.append("PASSED" if report.success else "FAILED")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run release quality gates.")
    parser.add_argument("--phase", choices=PHASES, help="run a single phase")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    args = parser.parse_args(argv)

    report = asyncio.run(QualityGateRunner().run(args.phase))
    print(dumps(report.to_dict()) if args.json else format_report(report))
    return 0 if report.success else 1


if __name__ == "__main__":
    sys.exit(main())
