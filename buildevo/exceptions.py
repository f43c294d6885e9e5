class BuildEvoError(Exception):
    """Base for all buildevo exceptions."""

    pass


# High-level families
class ConfigurationError(BuildEvoError):
    """Unknown catalog keys or inconsistent build selections."""

    pass


class ValidationError(BuildEvoError):
    """Data validation failures.

    Out-of-range optimization inputs are clamped rather than rejected, so
    nothing in the optimizer raises this; it names the category.
    """

    pass


class EvolutionError(BuildEvoError):
    """Evolution process failures."""

    pass


# Search subtypes
class BudgetViolationError(EvolutionError):
    """An allocation spends more points than its budget allows."""

    pass


class EvaluationError(EvolutionError):
    """Fitness evaluation failures."""

    pass


class MutationError(EvolutionError):
    """Mutation failures."""

    pass
