from __future__ import annotations

import importlib
import pkgutil
from typing import Callable, Dict, Iterable, List, Sequence, Tuple, cast

from esper import World

ABILITY_FACTORY_PACKAGES: Tuple[str, ...] = ("tactics.factories.ability_kits",)

AbilityBuilder = Callable[..., int]


def _discover_ability_builders() -> Dict[str, AbilityBuilder]:
    builders: Dict[str, AbilityBuilder] = {}
    for package_name in ABILITY_FACTORY_PACKAGES:
        package = importlib.import_module(package_name)
        for module in _iter_modules(package_name, package):
            for attr_name in dir(module):
                if not attr_name.startswith("create_ability_"):
                    continue
                factory = getattr(module, attr_name)
                if not callable(factory):
                    continue
                ability_name = attr_name[len("create_ability_") :]
                builders.setdefault(ability_name, cast(AbilityBuilder, factory))
    return builders


def _iter_modules(package_name: str, package) -> Iterable:
    yield package
    package_path = getattr(package, "__path__", None)
    if not package_path:
        return
    for module_info in pkgutil.iter_modules(package_path):
        if module_info.name.startswith("__"):
            continue
        yield importlib.import_module(f"{package_name}.{module_info.name}")


_ABILITY_BUILDERS: Dict[str, AbilityBuilder] = _discover_ability_builders()


def available_ability_names() -> List[str]:
    return sorted(_ABILITY_BUILDERS)


def create_ability_by_name(world: World, name: str, **overrides) -> int:
    try:
        builder = _ABILITY_BUILDERS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown ability '{name}'") from exc
    return builder(world, **overrides)


def create_loadout(world: World, names: Sequence[str]) -> List[int]:
    """Create one ability entity per name, keeping the given order."""
    return [create_ability_by_name(world, name) for name in names]
