from omegaconf import OmegaConf

from buildevo.stats.attributes import budget_for_level


def register_resolvers() -> None:
    """Resolvers available to run configs, e.g. ``${budget:${params.target_level}}``."""
    OmegaConf.register_new_resolver(
        "budget", lambda level: budget_for_level(int(level)), replace=True
    )
