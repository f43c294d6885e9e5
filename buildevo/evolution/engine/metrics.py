from __future__ import annotations

from pydantic import BaseModel, Field


class EngineMetrics(BaseModel):
    """Counters and best-score trace for one engine run."""

    total_generations: int = Field(default=0, description="Generations evaluated")
    evaluations: int = Field(default=0, description="Fitness evaluations performed")
    mutations_created: int = Field(default=0, description="Mutated children created")
    randoms_created: int = Field(default=0, description="Random allocations created")
    improvements: int = Field(default=0, description="Generations that raised the best score")
    best_score_history: list[float] = Field(
        default_factory=list, description="Best score after each generation"
    )
    stop_reason: str | None = Field(default=None, description="Why the loop ended")

    def record_generation(self, best_score: float, improved: bool) -> None:
        """Record the outcome of one evaluated generation."""
        self.total_generations += 1
        self.improvements += int(improved)
        self.best_score_history.append(best_score)

    def record_breeding_metrics(self, mutations_created: int, randoms_created: int) -> None:
        """Record how the next generation was filled."""
        self.mutations_created += mutations_created
        self.randoms_created += randoms_created
