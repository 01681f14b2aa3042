"""Tests for the evolution engine: lifecycle, step mode and termination."""

import pytest

from evosearch.evolution import EngineState, EvolutionConfig, EvolutionEngine, Phase
from evosearch.evolution.engine import validate_genome_type
from evosearch.evolution.genome import BinaryGenome, Genome, SequenceSpec
from evosearch.evolution.operators import (
    ElitistReplacement,
    RankSelection,
    ReplacementOperator,
    RouletteSelection,
    SwapMutation,
    list_operators,
)
from evosearch.evolution.problems import OneMaxGenome
from evosearch.exceptions import (
    EvoSearchConfigError,
    EvoSearchRuntimeError,
    GenomeContractError,
    InvariantViolationError,
)

GENERATION_PHASES = [Phase.SELECT, Phase.CROSSOVER, Phase.MUTATE, Phase.REPLACE, Phase.RECORD]


class FlatGenome(BinaryGenome):
    """Every individual scores the same."""

    def evaluate(self) -> float:
        return 1.0


class ShrinkingReplacement(ReplacementOperator):
    name = "Shrinking Replacement"

    def replace(self, population, offspring, rng):
        return list(population)[:-1]


def onemax_engine(length: int = 16, **options) -> EvolutionEngine:
    engine_options = {"population_size": 20, "max_generations": 5, "seed": 11}
    keywords = ("selection", "crossover", "mutation", "replacement", "on_generation")
    operators = {key: options.pop(key) for key in keywords if key in options}
    engine_options.update(options)
    return EvolutionEngine(OneMaxGenome, EvolutionConfig(**engine_options), SequenceSpec(length), **operators)


def test_genome_contract_is_checked() -> None:
    with pytest.raises(GenomeContractError):
        validate_genome_type(object())
    with pytest.raises(GenomeContractError) as err:
        EvolutionEngine(Genome)
    assert "evaluate" in err.value.context["missing"]

    class FactoryOnly:
        @classmethod
        def random_instance(cls, params=None, rng=None):
            return cls()

    with pytest.raises(GenomeContractError) as err:
        validate_genome_type(FactoryOnly)
    assert set(err.value.context["missing"]) == {"fitness", "clone", "genes"}
    validate_genome_type(OneMaxGenome)


def test_config_errors_surface_at_construction() -> None:
    with pytest.raises(EvoSearchConfigError):
        EvolutionEngine(OneMaxGenome, {"engine": {"population_size": 1}})
    with pytest.raises(EvoSearchConfigError):
        EvolutionEngine(OneMaxGenome, selection="lottery")
    with pytest.raises(EvoSearchConfigError):
        EvolutionEngine(OneMaxGenome, selection=SwapMutation())
    with pytest.raises(EvoSearchConfigError):
        EvolutionEngine(OneMaxGenome, {"operators": {"mutation": {"name": "gaussian", "params": {"sigma": -1}}}})


def test_operators_resolve_from_config_and_arguments() -> None:
    config = {"engine": {"population_size": 6}, "operators": {"selection": "rank"}}
    engine = EvolutionEngine(OneMaxGenome, config, SequenceSpec(8))
    assert isinstance(engine.selection, RankSelection)
    assert isinstance(engine.replacement, ElitistReplacement)
    assert engine.replacement.elitism_rate == 0.1
    engine = EvolutionEngine(OneMaxGenome, config, SequenceSpec(8), selection="roulette")
    assert isinstance(engine.selection, RouletteSelection)


def test_with_operator_only_before_initialisation() -> None:
    engine = onemax_engine()
    engine.with_operator("selection", "rank")
    assert isinstance(engine.selection, RankSelection)
    with pytest.raises(EvoSearchConfigError):
        engine.with_operator("breeding", "rank")
    engine.initialize()
    with pytest.raises(EvoSearchRuntimeError):
        engine.with_operator("selection", "tournament")


def test_run_stops_at_generation_limit() -> None:
    result = onemax_engine().run()
    assert result.termination_reason is EngineState.GENERATION_LIMIT_REACHED
    assert result.generations == 5
    assert [stats.generation for stats in result.history] == [0, 1, 2, 3, 4, 5]
    assert result.best_fitness == max(stats.best_fitness for stats in result.history[-1:])
    assert result.summary().startswith("Evolution Summary:")


def test_callback_receives_generation_and_best() -> None:
    calls = []
    engine = onemax_engine(on_generation=lambda generation, best: calls.append((generation, best)))
    result = engine.run()
    assert [generation for generation, _ in calls] == [1, 2, 3, 4, 5]
    assert [best for _, best in calls] == result.monitor.best_fitness_evolution()[1:]


@pytest.mark.parametrize("name", list_operators()["replacement"])
def test_population_size_is_constant(name) -> None:
    engine = onemax_engine(population_size=11, replacement=name, mutation="bit_flip")
    result = engine.run()
    assert all(stats.population_size == 11 for stats in result.history)
    assert len(engine.population) == 11


def test_elitist_best_fitness_never_decreases() -> None:
    engine = onemax_engine(max_generations=30, mutation="bit_flip", mutation_rate=0.2, convergence_generations=40)
    history = engine.run().monitor.best_fitness_evolution()
    assert all(later >= earlier for earlier, later in zip(history, history[1:]))


def test_step_mode_walks_through_phases() -> None:
    engine = onemax_engine(max_generations=2)
    assert engine.state is EngineState.UNINITIALIZED
    reports = list(engine.iter_steps())
    phases = [report.phase for report in reports]
    assert phases == [Phase.INITIALIZE] + GENERATION_PHASES * 2 + [Phase.TERMINATE]
    assert reports[0].state is EngineState.INITIALIZED
    assert reports[1].state is EngineState.EVOLVING
    assert reports[-2].state is EngineState.GENERATION_LIMIT_REACHED
    assert reports[-1].state is EngineState.TERMINATED
    assert [report.generation for report in reports if report.phase is Phase.RECORD] == [1, 2]
    assert engine.is_terminated
    assert engine.termination_reason is EngineState.GENERATION_LIMIT_REACHED


def test_terminated_engine_refuses_to_continue() -> None:
    engine = onemax_engine(max_generations=1)
    engine.run()
    with pytest.raises(EvoSearchRuntimeError):
        engine.step()
    with pytest.raises(EvoSearchRuntimeError):
        engine.run()
    with pytest.raises(EvoSearchRuntimeError):
        engine.run_generation()
    engine.reset()
    assert engine.state is EngineState.UNINITIALIZED
    assert engine.run().generations == 1


def test_run_generation_advances_one_generation() -> None:
    engine = onemax_engine(max_generations=3)
    stats = engine.run_generation()
    assert stats.generation == 1
    assert engine.run_generation().generation == 2
    assert engine.run_generation().generation == 3
    assert engine.state is EngineState.GENERATION_LIMIT_REACHED
    with pytest.raises(EvoSearchRuntimeError):
        engine.run_generation()


def test_fitness_goal_met_by_initial_population() -> None:
    result = onemax_engine(fitness_goal=0.0).run()
    assert result.termination_reason is EngineState.FITNESS_GOAL_REACHED
    assert result.generations == 0
    assert len(result.history) == 1


def test_convergence_stops_a_flat_landscape() -> None:
    config = EvolutionConfig(population_size=8, max_generations=50, convergence_generations=3, seed=2)
    result = EvolutionEngine(FlatGenome, config, SequenceSpec(6)).run()
    assert result.termination_reason is EngineState.CONVERGED
    assert result.generations == 2


def test_time_limit() -> None:
    result = onemax_engine(max_generations=50, time_limit=1e-9).run()
    assert result.termination_reason is EngineState.TIME_LIMIT_REACHED
    assert result.generations == 1


def test_survivors_age_every_generation() -> None:
    """On ties elitist replacement keeps the incumbents, which grow one generation older each time."""
    config = EvolutionConfig(
        population_size=6, max_generations=3, convergence_generations=50, crossover_rate=0.0, mutation_rate=0.0, seed=4
    )
    engine = EvolutionEngine(FlatGenome, config, SequenceSpec(5))
    engine.run()
    assert [genome.age for genome in engine.population] == [3] * 6


def test_wrong_size_replacement_is_an_invariant_violation() -> None:
    engine = onemax_engine(replacement=ShrinkingReplacement())
    with pytest.raises(InvariantViolationError):
        engine.run()


def test_same_seed_same_run() -> None:
    first = onemax_engine(max_generations=8, mutation="bit_flip").run()
    second = onemax_engine(max_generations=8, mutation="bit_flip").run()
    assert first.monitor.best_fitness_evolution() == second.monitor.best_fitness_evolution()
    assert first.best_individual.genes == second.best_individual.genes


def test_parallel_evaluation_matches_serial() -> None:
    serial = onemax_engine(max_generations=6).run()
    threaded = onemax_engine(max_generations=6, max_workers=4).run()
    assert serial.monitor.average_fitness_evolution() == threaded.monitor.average_fitness_evolution()


def test_queries_and_export(tmp_path) -> None:
    engine = onemax_engine(max_generations=2)
    with pytest.raises(EvoSearchRuntimeError):
        engine.best_individual()
    assert engine.population_statistics() == {}
    engine.run()
    assert engine.population_statistics()["best_fitness"] == engine.best_individual().fitness()
    path = engine.export_data(tmp_path / "history.csv")
    assert path.read_text().splitlines()[0].startswith("generation,timestamp")
    assert "state=terminated" in repr(engine)
