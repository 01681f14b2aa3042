"""Evolution module exports."""

from .config import EvolutionConfig
from .engine import EngineState, EvolutionEngine, EvolutionResult, Phase, StepReport
from .fitness import FitnessEvaluator
from .genome import BinaryGenome, BoundedSpec, GeneSequence, Genome, PermutationGenome, RealGenome, SequenceSpec
from .monitor import EvolutionMonitor, GenerationStats
from .population import PopulationManager, average_pairwise_diversity, fitness_statistics, genome_distance
from .scheduler import EvolutionScheduler, SchedulerConfig

__all__ = [
    "EvolutionConfig",
    "EngineState",
    "EvolutionEngine",
    "EvolutionResult",
    "Phase",
    "StepReport",
    "FitnessEvaluator",
    "Genome",
    "GeneSequence",
    "BinaryGenome",
    "PermutationGenome",
    "RealGenome",
    "SequenceSpec",
    "BoundedSpec",
    "EvolutionMonitor",
    "GenerationStats",
    "PopulationManager",
    "average_pairwise_diversity",
    "fitness_statistics",
    "genome_distance",
    "EvolutionScheduler",
    "SchedulerConfig",
]
