from __future__ import annotations

from pydantic import BaseModel, Field

from buildevo.stats.attributes import Allocation, Attribute, empty_allocation


class OptimizationResult(BaseModel):
    """Outcome of one ``optimize()`` call.

    A failed run carries ``success=False``, an all-zero allocation and the
    reason in ``reasoning``; callers must not apply it to a build.
    """

    success: bool = True
    build_type: str | None = None
    race: str | None = None
    subrace: str | None = None
    main_class: str | None = None
    sub_class: str | None = None
    allocation: dict[Attribute, int] = Field(default_factory=empty_allocation)
    final_stats: dict[Attribute, int] = Field(
        default_factory=dict, description="Floored scaled values for display"
    )
    total_points: int = 0
    budget: int = 0
    score: float = 0.0
    generations: int = 0
    stop_reason: str | None = None
    reasoning: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def failure(cls, message: str, **fields) -> OptimizationResult:
        return cls(success=False, reasoning=[message], **fields)

    @property
    def allocated(self) -> Allocation:
        """Only the attributes that received points."""
        return {attr: points for attr, points in self.allocation.items() if points}
