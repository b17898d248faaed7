import asyncio
import json

from app.services import quality_gates as qg
from app.services.quality_gates import (
    FAILED,
    PASSED,
    SKIPPED,
    WARNING,
    CommandOutcome,
    QualityGate,
    QualityGateRunner,
)


def scripted_runner(*outcomes):
    """Command runner replaying ``outcomes``; exceptions are raised."""
    calls = []
    queue = list(outcomes)

    async def run(argv, timeout, cwd):
        calls.append(list(argv))
        outcome = queue.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    return run, calls


def gate(name="lint", phase="development", automated=True, required=True, **kw):
    return QualityGate(name, phase, automated, required, **kw)


def run_gate(runner, g):
    return asyncio.run(runner.run_gate(g))


def test_manual_gate_is_a_warning():
    result = run_gate(QualityGateRunner(gates=[], checkers={}), gate(automated=False))
    assert result.status == WARNING
    assert result.details == ["Manual verification required"]


def test_gate_without_checker_is_skipped():
    result = run_gate(QualityGateRunner(gates=[], checkers={}), gate())
    assert result.status == SKIPPED


def test_checker_exception_fails_gate():
    async def boom(runner, g):
        raise RuntimeError("boom")

    result = run_gate(QualityGateRunner(gates=[], checkers={"lint": boom}), gate())
    assert result.status == FAILED
    assert result.details == ["Gate execution failed: boom"]


def test_command_check_pass_and_fail():
    check = qg.command_check(["ruff", "check"], "Lint passed", "Lint errors detected")
    run, calls = scripted_runner(CommandOutcome(0, ""), CommandOutcome(1, "a.py:1 E501\n\nb.py:2 F401\n"))
    runner = QualityGateRunner(gates=[], checkers={"lint": check}, command_runner=run)

    assert run_gate(runner, gate()).status == PASSED
    failed = run_gate(runner, gate())
    assert failed.status == FAILED
    assert failed.details == ["Lint errors detected", "a.py:1 E501", "b.py:2 F401"]
    assert calls == [["ruff", "check"], ["ruff", "check"]]


def test_run_tool_retries_then_succeeds():
    run, calls = scripted_runner(CommandOutcome(1, "flaky"), CommandOutcome(0, "ok"))
    runner = QualityGateRunner(gates=[], checkers={}, command_runner=run)
    outcome = asyncio.run(runner.run_tool(gate(retries=1), ["pip-audit"]))
    assert outcome.ok
    assert len(calls) == 2


def test_run_tool_missing_and_timeout():
    run, _ = scripted_runner(FileNotFoundError(), asyncio.TimeoutError())
    runner = QualityGateRunner(gates=[], checkers={}, command_runner=run)

    missing = asyncio.run(runner.run_tool(gate(), ["mypy"]))
    assert missing.returncode == 127
    assert missing.output == "mypy is not installed"

    slow = asyncio.run(runner.run_tool(gate(timeout=5), ["mypy"]))
    assert not slow.ok
    assert "timed out after 5s" in slow.output


def test_check_tests_parses_summary():
    run, _ = scripted_runner(CommandOutcome(0, "....\n12 passed, 2 skipped in 3.1s\n"))
    runner = QualityGateRunner(gates=[], checkers={"tdd-compliance": qg.check_tests}, command_runner=run)
    result = run_gate(runner, gate("tdd-compliance"))
    assert result.status == PASSED
    assert result.details == ["12 tests passed"]
    assert result.metrics == {"passed": 12, "skipped": 2}


def test_documentation_check(tmp_path):
    runner = QualityGateRunner(gates=[], checkers={}, root=tmp_path)
    g = gate("documentation-completeness")
    status, details, _ = asyncio.run(qg.check_documentation(runner, g))
    assert status == FAILED
    assert details == ["Missing README.md", "Missing DESIGN.md"]

    (tmp_path / "README.md").write_text("x")
    (tmp_path / "DESIGN.md").write_text("x")
    assert asyncio.run(qg.check_documentation(runner, g))[0] == PASSED


async def _fail(runner, g):
    return FAILED, ["nope"], {}


async def _pass(runner, g):
    return PASSED, ["fine"], {}


def test_run_all_stops_after_required_failure():
    gates = [
        gate("deps", "pre-implementation"),
        gate("lint", "development"),
    ]
    runner = QualityGateRunner(gates=gates, checkers={"deps": _fail, "lint": _pass})
    report = asyncio.run(runner.run_all())
    assert [r.name for r in report.results] == ["deps"]
    assert report.success is False


def test_optional_failure_does_not_stop_run():
    gates = [
        gate("types", "development", required=False),
        gate("schema", "integration"),
    ]
    runner = QualityGateRunner(gates=gates, checkers={"types": _fail, "schema": _pass})
    report = asyncio.run(runner.run_all())
    assert [r.name for r in report.results] == ["types", "schema"]
    # Any failed gate still fails the report
    assert report.success is False


def test_single_phase_run():
    gates = [gate("deps", "pre-implementation"), gate("lint", "development")]
    runner = QualityGateRunner(gates=gates, checkers={"deps": _pass, "lint": _pass})
    report = asyncio.run(runner.run("development"))
    assert [r.name for r in report.results] == ["lint"]
    assert report.success


def test_format_report():
    report = qg.RunReport([qg.GateResult("lint", "development", PASSED, 12.0, ["Lint passed"])], 12.0)
    assert qg.format_report(report).splitlines() == [
        "[  ok] development / lint (12 ms)",
        "       Lint passed",
        "PASSED",
    ]


def test_cli_json_output(monkeypatch, capsys):
    monkeypatch.setattr(qg, "DEFAULT_GATES", [gate("lint", "development")])
    monkeypatch.setattr(qg, "DEFAULT_CHECKERS", {"lint": _pass})
    assert qg.main(["--phase", "development", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["success"] is True
    assert out["results"][0]["name"] == "lint"


def test_cli_exit_code_on_failure(monkeypatch, capsys):
    monkeypatch.setattr(qg, "DEFAULT_GATES", [gate("lint", "development")])
    monkeypatch.setattr(qg, "DEFAULT_CHECKERS", {"lint": _fail})
    assert qg.main([]) == 1
    assert capsys.readouterr().out.strip().endswith("FAILED")
