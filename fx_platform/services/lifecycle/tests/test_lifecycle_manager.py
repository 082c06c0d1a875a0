from fx_platform.services.lifecycle.lifecycle_manager import LifecycleManager
from fx_platform.services.logger.memory_logger import MemoryLogger


async def test_hooks_run_in_reverse_order():
    calls: list[str] = []
    lm = LifecycleManager()
    lm.on_shutdown(lambda: calls.append("first"))

    async def second() -> None:
        calls.append("second")

    lm.on_shutdown(second)
    await lm.shutdown()
    assert calls == ["second", "first"]
    assert lm.is_shutting_down


async def test_shutdown_runs_once():
    calls: list[int] = []
    lm = LifecycleManager()
    lm.on_shutdown(lambda: calls.append(1))
    await lm.shutdown()
    await lm.shutdown()
    assert calls == [1]


async def test_failing_hook_is_logged_and_others_still_run():
    log = MemoryLogger()
    calls: list[str] = []

    def broken() -> None:
        raise RuntimeError("boom")

    lm = LifecycleManager(log=log)
    lm.on_shutdown(lambda: calls.append("ran"))
    lm.on_shutdown(broken)
    await lm.shutdown()

    assert calls == ["ran"]
    errors = log.at_level("ERROR")
    assert errors[0].msg == "Shutdown hook failed"
    assert errors[0].ctx["error"] == "boom"


def test_sync_signal_handler_sets_flag():
    lm = LifecycleManager()
    lm._handle_signal(15, None)
    assert lm.is_shutting_down
