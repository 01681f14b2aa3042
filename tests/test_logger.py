"""Tests for the Loguru based evolution logger."""

from loguru import logger

from evosearch.utils.logger import EvolutionLogger


def capture(level: str = "DEBUG"):
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record), level=level)
    return messages, handler_id


def test_run_is_bracketed_by_start_and_completion() -> None:
    messages, handler_id = capture()
    try:
        with EvolutionLogger("unit-run").start_run(params={"population_size": 10}):
            pass
    finally:
        logger.remove(handler_id)
    texts = [record["message"] for record in messages]
    assert texts[0] == "Starting EvoSearch run: unit-run"
    assert "population_size" in texts[1]
    assert texts[-1] == "Completed EvoSearch run: unit-run"
    assert all(record["extra"]["run"] == "unit-run" for record in messages)


def test_metrics_level_follows_verbosity() -> None:
    messages, handler_id = capture()
    try:
        EvolutionLogger(verbose=False).log_metrics({"best_fitness": 1.0}, step=3)
        EvolutionLogger(verbose=True).log_metrics({"best_fitness": 2.0})
    finally:
        logger.remove(handler_id)
    assert [record["level"].name for record in messages] == ["DEBUG", "INFO"]
    assert messages[0]["message"] == "Metrics@3: {'best_fitness': 1.0}"
    assert messages[1]["message"].startswith("Metrics@-")


def test_messages_with_braces_are_not_formatted() -> None:
    messages, handler_id = capture()
    try:
        EvolutionLogger().log_message("Best individual: {genes}")
    finally:
        logger.remove(handler_id)
    assert messages[0]["message"] == "Best individual: {genes}"
