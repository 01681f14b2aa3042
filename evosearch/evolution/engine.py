"""
Evolution engine driving the generational loop.

The engine owns the population, the generation counter and the random
generator of a run. One generation is a fixed sequence of phases::

    select -> crossover -> mutate -> replace -> record

after which the termination criteria are checked. :meth:`EvolutionEngine.run`
executes the whole loop; :meth:`EvolutionEngine.step` performs exactly one
phase and hands control back to the caller, which makes stepwise inspection
(a CLI pausing between phases, a notebook, a test) possible without any
blocking I/O inside the engine.
"""

from __future__ import annotations

import inspect
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from evosearch.exceptions import EvoSearchConfigError, EvoSearchRuntimeError, GenomeContractError, InvariantViolationError
from evosearch.utils.config_loader import ConfigLike
from evosearch.utils.logger import EvolutionLogger

from .config import EvolutionConfig
from .fitness import FitnessEvaluator
from .genome import Genome
from .monitor import EvolutionMonitor, GenerationStats
from .operators import (
    DEFAULT_OPERATORS,
    FAMILIES,
    CrossoverOperator,
    MutationOperator,
    Operator,
    ReplacementOperator,
    SelectionOperator,
    create_operator,
)
from .population import PopulationManager, best_individual, fitness_statistics

GenerationCallback = Callable[[int, float], Any]
OperatorLike = Union[Operator, str, None]

OPERATOR_BASES = {
    "selection": SelectionOperator,
    "crossover": CrossoverOperator,
    "mutation": MutationOperator,
    "replacement": ReplacementOperator,
}

GENOME_CAPABILITIES = ("fitness", "clone", "genes")


class EngineState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    EVOLVING = "evolving"
    CONVERGED = "converged"
    GENERATION_LIMIT_REACHED = "generation_limit_reached"
    TIME_LIMIT_REACHED = "time_limit_reached"
    FITNESS_GOAL_REACHED = "fitness_goal_reached"
    TERMINATED = "terminated"

    @property
    def is_stop_reason(self) -> bool:
        return self in STOP_REASONS


STOP_REASONS = frozenset(
    {
        EngineState.CONVERGED,
        EngineState.GENERATION_LIMIT_REACHED,
        EngineState.TIME_LIMIT_REACHED,
        EngineState.FITNESS_GOAL_REACHED,
    }
)


class Phase(str, Enum):
    INITIALIZE = "initialize"
    SELECT = "select"
    CROSSOVER = "crossover"
    MUTATE = "mutate"
    REPLACE = "replace"
    RECORD = "record"
    TERMINATE = "terminate"


@dataclass(frozen=True)
class StepReport:
    """Outcome of one :meth:`EvolutionEngine.step` call."""

    phase: Phase
    generation: int
    state: EngineState
    best_fitness: Optional[float]
    message: str = ""


@dataclass
class EvolutionResult:
    """Everything a caller needs once a run terminated."""

    best_individual: Genome
    best_fitness: float
    generations: int
    termination_reason: Optional[EngineState]
    runtime: float
    monitor: EvolutionMonitor = field(repr=False)

    @property
    def history(self) -> List[GenerationStats]:
        return self.monitor.generation_stats

    def summary(self) -> str:
        return self.monitor.summary()


def validate_genome_type(genome_type: Any) -> None:
    """
    Reject genome types that cannot seed a population.

    A genome type must offer a callable ``random_instance``; a class must also
    be concrete and expose ``fitness``, ``clone`` and ``genes``.

    Raises
    ------
    GenomeContractError
        When a required capability is missing.
    """

    name = getattr(genome_type, "__name__", type(genome_type).__name__)
    factory = getattr(genome_type, "random_instance", None)
    if factory is None or not callable(factory):
        raise GenomeContractError(
            f"Genome type {name} must implement a random_instance factory",
            context={"genome_type": name, "missing": ["random_instance"]},
        )
    if not inspect.isclass(genome_type):
        return
    missing = [capability for capability in GENOME_CAPABILITIES if not hasattr(genome_type, capability)]
    if missing:
        raise GenomeContractError(
            f"Genome type {name} is missing required capabilities: {', '.join(missing)}",
            context={"genome_type": name, "missing": missing},
        )
    if inspect.isabstract(genome_type):
        abstract = sorted(getattr(genome_type, "__abstractmethods__", ()))
        raise GenomeContractError(
            f"Genome type {name} is abstract; implement {', '.join(abstract)}",
            context={"genome_type": name, "missing": abstract},
        )


class EvolutionEngine:
    """Central coordinator of an evolutionary search."""

    def __init__(
        self,
        genome_type: Any,
        config: Optional[Union[EvolutionConfig, ConfigLike]] = None,
        params: Any = None,
        *,
        selection: OperatorLike = None,
        crossover: OperatorLike = None,
        mutation: OperatorLike = None,
        replacement: OperatorLike = None,
        on_generation: Optional[GenerationCallback] = None,
        monitor: Optional[EvolutionMonitor] = None,
        run_name: str = "evosearch",
    ) -> None:
        """Create a new engine.

        Parameters
        ----------
        genome_type : type
            Genome class (or any object) exposing ``random_instance(params, rng)``.
        config : EvolutionConfig, mapping, path or YAML string, optional
            Hyper-parameters of the run; defaults to :class:`EvolutionConfig`.
        params : object, optional
            Immutable problem parameters handed to ``random_instance``.
        selection, crossover, mutation, replacement : Operator or str, optional
            Operator instances or registered names. Missing families are
            resolved from ``config.operators`` and then from the defaults
            (tournament, single point, swap, elitist).
        on_generation : callable, optional
            Called as ``on_generation(generation, best_fitness)`` after every
            recorded generation.
        """

        self.config = self._coerce_config(config)
        validate_genome_type(genome_type)
        self.genome_type = genome_type
        self.params = params
        explicit = {
            "selection": selection,
            "crossover": crossover,
            "mutation": mutation,
            "replacement": replacement,
        }
        self.operators: Dict[str, Operator] = {
            family: self._resolve_operator(family, explicit[family]) for family in FAMILIES
        }
        self.on_generation = on_generation
        self.monitor = monitor or EvolutionMonitor()
        self.evaluator = FitnessEvaluator(self.config.max_workers)
        self.logger = EvolutionLogger(run_name=run_name, verbose=self.config.verbose)
        self.population_manager = PopulationManager(
            factory=genome_type.random_instance,
            population_size=self.config.population_size,
            params=params,
        )
        self.rng = self.config.make_rng()
        self.state = EngineState.UNINITIALIZED
        self.termination_reason: Optional[EngineState] = None
        self.generation = 0
        self._next_phase = Phase.INITIALIZE
        self._start_time: Optional[float] = None
        self._parents: List[Genome] = []
        self._offspring: List[Genome] = []
        self._phases = {
            Phase.SELECT: self._select,
            Phase.CROSSOVER: self._crossover,
            Phase.MUTATE: self._mutate,
            Phase.REPLACE: self._replace,
            Phase.RECORD: self._record,
        }

    # ---------------------------------------------------------------- set-up
    @staticmethod
    def _coerce_config(config: Optional[Union[EvolutionConfig, ConfigLike]]) -> EvolutionConfig:
        if config is None:
            return EvolutionConfig()
        if isinstance(config, EvolutionConfig):
            return config
        return EvolutionConfig.load(config)

    def _resolve_operator(self, family: str, value: OperatorLike) -> Operator:
        if value is None:
            spec = self.config.operators.get(family) or {"name": DEFAULT_OPERATORS[family], "params": {}}
            value, params = spec["name"], spec.get("params", {})
        else:
            params = {}
        if isinstance(value, str):
            try:
                value = create_operator(family, value, self.config, **params)
            except KeyError as exc:
                raise EvoSearchConfigError(str(exc.args[0]), context={"family": family}) from exc
            except (TypeError, ValueError) as exc:
                raise EvoSearchConfigError(
                    f"Invalid parameters for {family} operator '{value}': {exc}",
                    context={"family": family, "params": dict(params)},
                ) from exc
        if not isinstance(value, OPERATOR_BASES[family]):
            raise EvoSearchConfigError(
                f"{family.capitalize()} operator must be a {OPERATOR_BASES[family].__name__}, got {type(value).__name__}",
                context={"family": family},
            )
        return value

    @property
    def selection(self) -> SelectionOperator:
        return self.operators["selection"]  # type: ignore[return-value]

    @property
    def crossover(self) -> CrossoverOperator:
        return self.operators["crossover"]  # type: ignore[return-value]

    @property
    def mutation(self) -> MutationOperator:
        return self.operators["mutation"]  # type: ignore[return-value]

    @property
    def replacement(self) -> ReplacementOperator:
        return self.operators["replacement"]  # type: ignore[return-value]

    def with_operator(self, family: str, operator: OperatorLike) -> "EvolutionEngine":
        """Swap the operator of ``family`` before the run starts."""

        if self.state is not EngineState.UNINITIALIZED:
            raise EvoSearchRuntimeError("Operators can only be changed before initialisation")
        if family not in FAMILIES:
            raise EvoSearchConfigError(f"Unknown operator family '{family}'. Options: {list(FAMILIES)}")
        self.operators[family] = self._resolve_operator(family, operator)
        return self

    @property
    def population(self) -> List[Genome]:
        return self.population_manager.genomes

    @property
    def elapsed(self) -> float:
        return 0.0 if self._start_time is None else time.perf_counter() - self._start_time

    @property
    def is_terminated(self) -> bool:
        return self.state is EngineState.TERMINATED

    # ------------------------------------------------------------- lifecycle
    def initialize(self) -> GenerationStats:
        """Seed and evaluate a fresh population, recorded as generation 0."""

        self.rng = self.config.make_rng()
        for operator in self.operators.values():
            operator.reset()
        self.generation = 0
        self.termination_reason = None
        self._parents, self._offspring = [], []
        self.monitor.start()
        self._start_time = time.perf_counter()

        self.population_manager.seed(self.rng)
        self.evaluator.evaluate(self.population)
        self.population_manager.normalize()
        stats = self.monitor.record_generation(0, self.population)
        self.state = EngineState.INITIALIZED
        self._next_phase = Phase.SELECT
        self.logger.log_message(
            f"Initialised population of {len(self.population)} {self._genome_name} genomes "
            f"(best fitness {stats.best_fitness:.4f})"
        )
        for operator in self.operators.values():
            operator.observe(stats)
        if self.config.fitness_goal is not None and stats.best_fitness >= self.config.fitness_goal:
            self._stop(EngineState.FITNESS_GOAL_REACHED)
        return stats

    def reset(self) -> None:
        """Return to ``UNINITIALIZED``; the next run starts from a fresh seed."""
        self.population_manager.genomes = []
        self.state = EngineState.UNINITIALIZED
        self.termination_reason = None
        self.generation = 0
        self._next_phase = Phase.INITIALIZE
        self._parents, self._offspring = [], []

    def step(self) -> StepReport:
        """
        Perform exactly one phase transition.

        From ``UNINITIALIZED`` the step initialises the population. While
        evolving, each call runs the next phase of the current generation.
        Once a stop reason was reached, one more call finalises the run and
        moves to ``TERMINATED``; stepping a terminated engine raises
        :class:`EvoSearchRuntimeError`.
        """

        if self.state is EngineState.TERMINATED:
            raise EvoSearchRuntimeError(
                "Search already terminated; call reset() to start a new run",
                context={"reason": self.termination_reason.value if self.termination_reason else None},
            )
        if self.state is EngineState.UNINITIALIZED:
            self.initialize()
            return self._report(Phase.INITIALIZE, f"Created {len(self.population)} random individuals")
        if self.state.is_stop_reason:
            self._finalize()
            return self._report(Phase.TERMINATE, f"Evolution completed: {self.termination_reason.value}")

        phase = self._next_phase
        message = self._phases[phase]()
        return self._report(phase, message)

    def iter_steps(self) -> Iterator[StepReport]:
        """Yield one :class:`StepReport` per phase until the run terminates."""
        while self.state is not EngineState.TERMINATED:
            yield self.step()

    def run_generation(self) -> GenerationStats:
        """Finish the current generation (initialising first when needed) and return its statistics."""

        if self.state is EngineState.UNINITIALIZED:
            self.initialize()
        if self.state is EngineState.TERMINATED or self.state.is_stop_reason:
            raise EvoSearchRuntimeError(
                "Cannot evolve a search that already stopped",
                context={"state": self.state.value},
            )
        while True:
            report = self.step()
            if report.phase is Phase.RECORD:
                return self.monitor.generation_stats[-1]

    def run(self) -> EvolutionResult:
        """Evolve until a termination criterion is met and return the result."""

        if self.state is EngineState.TERMINATED:
            raise EvoSearchRuntimeError("Search already terminated; call reset() to start a new run")
        with self.logger.start_run(params=self.config.engine_dict()):
            if self.config.verbose:
                self.logger.log_message(self.config.describe())
            for _ in self.iter_steps():
                pass
        return self.result()

    def result(self) -> EvolutionResult:
        best = self.best_individual()
        return EvolutionResult(
            best_individual=best,
            best_fitness=best.fitness(),
            generations=self.generation,
            termination_reason=self.termination_reason,
            runtime=self.monitor.runtime,
            monitor=self.monitor,
        )

    # ---------------------------------------------------------------- phases
    def _select(self) -> str:
        self.state = EngineState.EVOLVING
        size = self.config.population_size
        parent_count = size + size % 2
        self._parents = self.selection.select(self.population, parent_count, self.rng)
        self._next_phase = Phase.CROSSOVER
        return f"Selected {len(self._parents)} parents with {self.selection.name}"

    def _crossover(self) -> str:
        offspring: List[Genome] = []
        recombined = 0
        for index in range(0, len(self._parents) - 1, 2):
            parent_a, parent_b = self._parents[index], self._parents[index + 1]
            if self.rng.random() < self.config.crossover_rate:
                offspring.extend(self.crossover.crossover(parent_a, parent_b, self.rng))
                recombined += 1
            else:
                offspring.extend((parent_a.clone(), parent_b.clone()))
        self._offspring = offspring[: self.config.population_size]
        self._parents = []
        self._next_phase = Phase.MUTATE
        return f"Created {len(self._offspring)} offspring ({recombined} pairs recombined)"

    def _mutate(self) -> str:
        mutated = [self.mutation.mutate(child, self.config.mutation_rate, self.rng) for child in self._offspring]
        pending = sum(1 for child in mutated if not child.is_evaluated)
        self._offspring = mutated
        self.evaluator.evaluate(self._offspring)
        self._next_phase = Phase.REPLACE
        return f"Mutated {len(mutated)} offspring with {self.mutation.name}, evaluated {pending}"

    def _replace(self) -> str:
        previous = self.population
        next_population = self.replacement.replace(previous, self._offspring, self.rng)
        if len(next_population) != self.config.population_size:
            raise InvariantViolationError(
                f"{self.replacement.name} returned {len(next_population)} individuals, "
                f"expected {self.config.population_size}",
                context={"operator": type(self.replacement).__name__, "size": len(next_population)},
            )
        survivors = {id(genome) for genome in previous}
        for genome in next_population:
            if id(genome) in survivors:
                genome.age += 1
        self.population_manager.genomes = list(next_population)
        self._offspring = []
        self._next_phase = Phase.RECORD
        return f"Replaced population with {self.replacement.name}"

    def _record(self) -> str:
        self.evaluator.evaluate(self.population)
        self.population_manager.normalize()
        self.generation += 1
        stats = self.monitor.record_generation(self.generation, self.population)
        for operator in self.operators.values():
            operator.observe(stats)
        self.logger.log_metrics(
            {
                "best_fitness": stats.best_fitness,
                "average_fitness": stats.average_fitness,
                "diversity": stats.diversity,
            },
            step=self.generation,
        )
        if self.on_generation is not None:
            self.on_generation(self.generation, stats.best_fitness)
        self._next_phase = Phase.SELECT
        reason = self._check_termination(stats)
        if reason is not None:
            self._stop(reason)
        return stats.describe()

    # ------------------------------------------------------------ termination
    def _check_termination(self, stats: GenerationStats) -> Optional[EngineState]:
        config = self.config
        if config.fitness_goal is not None and stats.best_fitness >= config.fitness_goal:
            return EngineState.FITNESS_GOAL_REACHED
        if self.monitor.converged(config.convergence_generations, config.convergence_threshold):
            return EngineState.CONVERGED
        if config.time_limit is not None and self.elapsed > config.time_limit:
            return EngineState.TIME_LIMIT_REACHED
        if self.generation >= config.max_generations:
            return EngineState.GENERATION_LIMIT_REACHED
        return None

    def _stop(self, reason: EngineState) -> None:
        self.state = reason
        self.termination_reason = reason
        self.logger.log_message(f"Stopping after generation {self.generation}: {reason.value}")

    def _finalize(self) -> None:
        self.monitor.finish()
        self.state = EngineState.TERMINATED
        self.logger.log_message(self.monitor.summary())

    # -------------------------------------------------------------- queries
    def best_individual(self) -> Genome:
        """Fittest genome of the current population; ties go to the first one."""
        if not self.population:
            raise EvoSearchRuntimeError("The population is empty; initialise the engine first")
        return best_individual(self.population)

    def population_statistics(self) -> Dict[str, float]:
        if not self.population:
            return {}
        return fitness_statistics(self.population).as_dict()

    def export_data(self, path) -> Any:
        return self.monitor.export_csv(path)

    @property
    def _genome_name(self) -> str:
        return getattr(self.genome_type, "__name__", type(self.genome_type).__name__)

    def _report(self, phase: Phase, message: str) -> StepReport:
        best = best_individual(self.population).fitness() if self.population else None
        return StepReport(
            phase=phase,
            generation=self.generation,
            state=self.state,
            best_fitness=best,
            message=message,
        )

    def __repr__(self) -> str:
        operators = ", ".join(f"{family}={operator!r}" for family, operator in self.operators.items())
        return f"EvolutionEngine({self._genome_name}, state={self.state.value}, {operators})"


__all__ = [
    "EngineState",
    "EvolutionEngine",
    "EvolutionResult",
    "Phase",
    "StepReport",
    "STOP_REASONS",
    "validate_genome_type",
]
