from jobdaemon import EXIT_MEMORY, EXIT_OK, EXIT_TIMEOUT, ExitReason, RunResult


def test_exit_codes_per_reason():
    assert ExitReason.QUIT.exit_code == EXIT_OK == 0
    assert ExitReason.RESTART.exit_code == EXIT_OK
    assert ExitReason.TIMEOUT.exit_code == EXIT_TIMEOUT == 1
    assert ExitReason.MEMORY.exit_code == EXIT_MEMORY == 12


def test_run_result_to_dict():
    result = RunResult(reason=ExitReason.MEMORY, iterations=7)
    assert result.to_dict() == {"reason": "memory", "exit_code": 12, "iterations": 7}
