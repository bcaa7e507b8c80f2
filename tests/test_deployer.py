import asyncio
import time

from deployer import ScriptRunner

TEST_SHELL = "/bin/sh"


def run_script(runner, script, repo_name="agora"):
    return asyncio.run(runner.run(repo_name, script))


def test_success_captures_output(make_script):
    script = make_script("echo OK\n")

    outcome = run_script(ScriptRunner(TEST_SHELL), script)

    assert outcome.success is True
    assert outcome.exit_code == 0
    assert outcome.text == "OK\n"
    assert outcome.timed_out is False


def test_nonzero_exit_is_failure(make_script):
    script = make_script("echo 'build failed'\nexit 2\n")

    outcome = run_script(ScriptRunner(TEST_SHELL), script)

    assert outcome.success is False
    assert outcome.exit_code == 2
    assert "build failed" in outcome.text
    assert outcome.describe() == "exit status 2"


def test_stdout_and_stderr_are_combined_in_order(make_script):
    script = make_script("echo one\necho two >&2\necho three\n")

    outcome = run_script(ScriptRunner(TEST_SHELL), script)

    assert outcome.text == "one\ntwo\nthree\n"


def test_output_is_not_interpreted(make_script):
    script = make_script("echo 'ERROR: everything is on fire'\nexit 0\n")

    outcome = run_script(ScriptRunner(TEST_SHELL), script)

    assert outcome.success is True


def test_missing_interpreter_is_failure(make_script):
    script = make_script("echo OK\n")

    outcome = run_script(ScriptRunner("/nonexistent/shell"), script)

    assert outcome.success is False
    assert outcome.exit_code is None
    assert outcome.error.startswith("could not start")
    assert outcome.output


def test_timeout_kills_script_and_keeps_output(make_script):
    script = make_script("echo started\nexec sleep 10\n")

    outcome = run_script(ScriptRunner(TEST_SHELL, timeout=1), script)

    assert outcome.success is False
    assert outcome.timed_out is True
    assert outcome.exit_code is None
    assert "timed out" in outcome.describe()
    assert outcome.text == "started\n"


def test_no_timeout_by_default():
    assert ScriptRunner(TEST_SHELL).timeout is None


def test_hung_script_does_not_hold_up_other_deploys(make_script):
    hung = make_script("exec sleep 10\n", name="hung.sh")
    quick = make_script("echo OK\n", name="quick.sh")
    runner = ScriptRunner(TEST_SHELL, timeout=3)

    async def scenario():
        # More hung scripts than a default thread pool has workers.
        stuck = [asyncio.ensure_future(runner.run(f"repo-{i}", hung)) for i in range(40)]
        await asyncio.sleep(0.2)
        started = time.monotonic()
        outcome = await runner.run("agora", quick)
        elapsed = time.monotonic() - started
        await asyncio.gather(*stuck)
        return outcome, elapsed

    outcome, elapsed = asyncio.run(scenario())

    assert outcome.success is True
    assert elapsed < 2


def test_serialized_runs_do_not_overlap(make_script, tmp_path):
    log = tmp_path / "log"
    script = make_script(f"echo start >> '{log}'\nsleep 0.3\necho end >> '{log}'\n")
    runner = ScriptRunner(TEST_SHELL, serialize=True)

    async def scenario():
        await asyncio.gather(runner.run("agora", script), runner.run("agora", script))

    asyncio.run(scenario())

    assert log.read_text().split() == ["start", "end", "start", "end"]


def test_serialization_is_per_repository(make_script, tmp_path):
    log = tmp_path / "log"
    script = make_script(f"echo start >> '{log}'\nsleep 0.5\necho end >> '{log}'\n")
    runner = ScriptRunner(TEST_SHELL, serialize=True)

    async def scenario():
        await asyncio.gather(runner.run("agora", script), runner.run("agora-backend", script))

    asyncio.run(scenario())

    assert log.read_text().split() == ["start", "start", "end", "end"]
