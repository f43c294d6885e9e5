from __future__ import annotations

import math

import numpy as np
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from buildevo.objectives.models import Objective
from buildevo.objectives.priorities import GENERATOR_BLEND, PriorityBlend, PriorityTable
from buildevo.objectives.resources import gated_faith_floor
from buildevo.stats.attributes import (
    APTITUDE_NUMBER,
    MAX_POINTS_PER_ATTRIBUTE,
    NON_APTITUDE,
    Allocation,
    Attribute,
    empty_allocation,
    ensure_within_budget,
)
from buildevo.stats.context import BuildContext

__all__ = ["AllocationGenerator", "GeneratorConfig"]


class GeneratorConfig(BaseModel):
    """Tunables for heuristic and random allocation."""

    model_config = ConfigDict(frozen=True)

    greedy_share: float = Field(default=0.85, gt=0, le=1)
    efficiency_floor: float = Field(default=0.3, ge=0)
    fallback_efficiency_floor: float = Field(default=0.2, ge=0)
    greedy_cap: int = Field(default=70, gt=0, le=MAX_POINTS_PER_ATTRIBUTE)
    critical_minimum_share: float = Field(default=0.6, ge=0, le=1)
    critical_attributes: tuple[Attribute, ...] = (Attribute.VIT, Attribute.SKI)
    aptitude_search_limit: int = Field(default=100, gt=0)
    max_aptitude_target: int = Field(default=42, gt=0)
    random_aptitude_cap: int = Field(default=50, ge=0)
    random_rejection_probability: float = Field(default=0.7, ge=0, le=1)
    hp_estimate_base: int = 350
    hp_estimate_str: int = 60
    hp_estimate_san: int = 20
    hp_estimate_vit_cap: int = Field(default=40, ge=0)


class AllocationGenerator:
    """Builds budget-respecting allocations for the initial population.

    ``initial`` is the priority-driven heuristic seed, ``random`` the
    diversity source. Both spend the whole budget unless per-attribute caps
    leave nowhere to put the points.
    """

    def __init__(
        self,
        context: BuildContext,
        objective: Objective,
        priorities: PriorityTable,
        rng: np.random.Generator,
        config: GeneratorConfig | None = None,
        blend: PriorityBlend = GENERATOR_BLEND,
    ):
        self.context = context
        self.objective = objective
        self.rng = rng
        self.config = config or GeneratorConfig()
        self.order = priorities.ranked(blend)
        self.faith_floor = gated_faith_floor(objective.weights, context)

    # ---------- Shared helpers ----------
    def aptitude_points_for(self, target: float) -> int:
        """Fewest aptitude points whose scaled aptitude reaches ``target``.

        Uses the direct difference for the maximum supported target while it
        stays under the soft cap; otherwise scans 0..limit.
        """
        if target == self.config.max_aptitude_target:
            if target <= self.context.soft_cap(Attribute.APT):
                points = math.ceil(target - self.context.scaled(Attribute.APT, 0))
                return max(0, points)
        for points in range(self.config.aptitude_search_limit + 1):
            if self.context.scaled(Attribute.APT, points) >= target:
                return points
        return self.config.aptitude_search_limit

    def _is_open(self, allocation: Allocation, attr: Attribute, apt_bonus: int, cap: int) -> bool:
        if allocation[attr] >= cap:
            return False
        ceiling = self.objective.ceiling(attr)
        if ceiling is None:
            return True
        return self.context.scaled(attr, allocation[attr], apt_bonus) < ceiling

    def _fund_until(
        self, allocation: Allocation, attr: Attribute, goal: float, remaining: int
    ) -> int:
        """Add points to ``attr`` until its final value reaches ``goal``."""
        while (
            remaining > 0
            and allocation[attr] < MAX_POINTS_PER_ATTRIBUTE
            and self.context.final_stat(allocation, attr) < goal
        ):
            allocation[attr] += 1
            remaining -= 1
        return remaining

    def _reserve(self, allocation: Allocation, attr: Attribute, points: int, remaining: int) -> int:
        points = max(0, min(points, remaining, MAX_POINTS_PER_ATTRIBUTE - allocation[attr]))
        allocation[attr] += points
        return remaining - points

    # ---------- Heuristic ----------
    def initial(self, budget: int) -> Allocation:
        cfg = self.config
        weights = self.objective.weights
        allocation = empty_allocation()
        remaining = budget

        hard_aptitude = weights.target_apt
        if hard_aptitude:
            remaining = self._reserve(
                allocation, Attribute.APT, self.aptitude_points_for(hard_aptitude), remaining
            )

        remaining = self._prefund(allocation, remaining, include_aptitude=not hard_aptitude)

        greedy_budget = math.floor(remaining * cfg.greedy_share)
        while greedy_budget > 0:
            attr = self._pick_greedy(allocation, cfg.efficiency_floor, cfg.greedy_cap)
            if attr is None:
                break
            allocation[attr] += 1
            greedy_budget -= 1
            remaining -= 1

        remaining = self._spend_rest(allocation, remaining)
        logger.debug(
            "[AllocationGenerator] Heuristic seed | budget={}, unspent={}", budget, remaining
        )
        return ensure_within_budget(allocation, budget)

    def _prefund(self, allocation: Allocation, remaining: int, include_aptitude: bool) -> int:
        objective = self.objective
        if objective.target_mode:
            # Aptitude first: its bonus lowers what every other target needs.
            targets = sorted(
                objective.targets.items(), key=lambda item: item[0] is not Attribute.APT
            )
            for attr, target in targets:
                remaining = self._fund_until(allocation, attr, target, remaining)

        if self.faith_floor:
            remaining = self._reserve(
                allocation, Attribute.FAI, self.faith_floor - allocation[Attribute.FAI], remaining
            )

        critical = list(self.config.critical_attributes)
        if include_aptitude:
            critical.append(Attribute.APT)
        for attr in critical:
            threshold = objective.build_type.stat_thresholds.get(attr)
            if threshold is None or not threshold.min:
                continue
            goal = threshold.min * self.config.critical_minimum_share
            remaining = self._fund_until(allocation, attr, goal, remaining)
        return remaining

    def _pick_greedy(self, allocation: Allocation, floor: float, cap: int) -> Attribute | None:
        apt_bonus = self.context.aptitude_bonus(allocation)
        for attr in self.order:
            if not self._is_open(allocation, attr, apt_bonus, cap):
                continue
            if self.context.marginal_gain(allocation, attr, apt_bonus) >= floor:
                return attr
        return None

    def _aptitude_breakpoint_cost(self, allocation: Allocation, remaining: int) -> int | None:
        final_apt = self.context.final_aptitude(allocation)
        current = math.floor(final_apt)
        if current % APTITUDE_NUMBER == 0:
            return None
        goal = (current // APTITUDE_NUMBER + 1) * APTITUDE_NUMBER
        ceiling = self.objective.ceiling(Attribute.APT)
        if ceiling is not None and goal > ceiling:
            return None
        points = allocation[Attribute.APT]
        for extra in range(1, min(APTITUDE_NUMBER, remaining) + 1):
            if points + extra > MAX_POINTS_PER_ATTRIBUTE:
                return None
            if self.context.scaled(Attribute.APT, points + extra) >= goal:
                return extra
        return None

    def _spend_rest(self, allocation: Allocation, remaining: int) -> int:
        cfg = self.config
        while remaining > 0:
            cost = self._aptitude_breakpoint_cost(allocation, remaining)
            if cost is not None:
                allocation[Attribute.APT] += cost
                remaining -= cost
                continue

            attr = self._pick_greedy(
                allocation, cfg.fallback_efficiency_floor, MAX_POINTS_PER_ATTRIBUTE
            )
            if attr is not None:
                allocation[attr] += 1
                remaining -= 1
                continue

            attr = self._dump_target(allocation)
            if attr is None:
                break
            remaining = self._reserve(allocation, attr, remaining, remaining)
        return remaining

    def _dump_target(self, allocation: Allocation) -> Attribute | None:
        apt_bonus = self.context.aptitude_bonus(allocation)
        under_cap = [a for a in self.order if allocation[a] < MAX_POINTS_PER_ATTRIBUTE]
        for attr in under_cap:
            if self._is_open(allocation, attr, apt_bonus, MAX_POINTS_PER_ATTRIBUTE):
                return attr
        return under_cap[0] if under_cap else None

    # ---------- Random ----------
    def random(self, budget: int) -> Allocation:
        cfg = self.config
        weights = self.objective.weights
        allocation = empty_allocation()
        remaining = budget

        if self.faith_floor:
            remaining = self._reserve(allocation, Attribute.FAI, self.faith_floor, remaining)
        if weights.minimum_hp:
            estimated = cfg.hp_estimate_base + cfg.hp_estimate_str + cfg.hp_estimate_san
            vit = math.ceil((weights.minimum_hp - estimated) / 10)
            vit = min(cfg.hp_estimate_vit_cap, max(0, vit))
            remaining = self._reserve(
                allocation, Attribute.VIT, vit - allocation[Attribute.VIT], remaining
            )
        if weights.target_apt:
            points = min(self.aptitude_points_for(weights.target_apt), cfg.random_aptitude_cap)
            remaining = self._reserve(allocation, Attribute.APT, points, remaining)

        apt_bonus = self.context.aptitude_bonus(allocation)
        candidates = list(NON_APTITUDE)
        while remaining > 0 and candidates:
            attr = candidates[int(self.rng.integers(len(candidates)))]
            if not self._is_open(allocation, attr, apt_bonus, MAX_POINTS_PER_ATTRIBUTE):
                candidates.remove(attr)
                continue
            gain = self.context.marginal_gain(allocation, attr, apt_bonus)
            if self.rng.random() < cfg.random_rejection_probability and gain < cfg.efficiency_floor:
                continue
            allocation[attr] += 1
            remaining -= 1

        return ensure_within_budget(allocation, budget)
