"""
NIGHTPLAN Priority Ranker

Additive scoring of sequences:
- Difficulty bonus (beginner/intermediate/advanced)
- Visibility bonus from the target's altitude and airmass at run start
- Penalty for very long sequences

Higher scores are scheduled first.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from nightplan.config import SchedulerConfig
from nightplan.logging_config import get_logger

from .models import Difficulty, Sequence, SchedulingOptions, Target
from .observability import ObservabilityOracle, observe

logger = get_logger(__name__)


@dataclass
class RankedSequence:
    """A sequence resolved to its target, with its score."""

    sequence: Sequence
    target: Target
    score: float


@dataclass
class PrioritizedSequences:
    """Ranking output: scheduling order plus sequences that were dropped."""

    ranked: list[RankedSequence] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class PriorityRanker:
    """Scores and orders sequences for the greedy scheduler."""

    def __init__(
        self,
        oracle: ObservabilityOracle,
        config: Optional[SchedulerConfig] = None,
    ):
        self._oracle = oracle
        self._config = config or SchedulerConfig()

    def rank(self, sequence: Sequence, target: Target, options: SchedulingOptions) -> float:
        """Score a single sequence against its target."""
        config = self._config
        score = 0.0

        difficulty = sequence.metadata.difficulty
        if isinstance(difficulty, Difficulty):
            score += config.difficulty_bonus.get(difficulty.value, 0.0)

        data = observe(self._oracle, target, options.location, options.start_date)
        constraints = options.constraints

        # Unknown altitude/airmass earn nothing
        if data.altitude is not None and data.altitude > constraints.min_altitude:
            score += config.altitude_bonus
        if data.airmass is not None and data.airmass < constraints.max_airmass:
            score += config.airmass_bonus

        if sequence.estimated_duration > config.long_sequence_hours * 3600:
            score -= config.long_sequence_penalty

        return score

    def prioritize(
        self,
        sequences: Iterable[Sequence],
        targets: Iterable[Target],
        options: SchedulingOptions,
    ) -> PrioritizedSequences:
        """Resolve targets, score, and sort by descending score.

        Sequences whose target cannot be found are left out with a warning.
        Equal scores keep their input order.
        """
        by_id = {t.id: t for t in targets}
        result = PrioritizedSequences()

        for sequence in sequences:
            target = by_id.get(sequence.target) if sequence.target is not None else None
            if target is None:
                logger.warning(f"Target not found for sequence {sequence.name}")
                result.warnings.append(f"Target not found for sequence {sequence.name}")
                continue

            score = self.rank(sequence, target, options)
            logger.debug(f"Sequence {sequence.name} scored {score}")
            result.ranked.append(RankedSequence(sequence, target, score))

        # sorted() is stable
        result.ranked = sorted(result.ranked, key=lambda r: r.score, reverse=True)
        return result
