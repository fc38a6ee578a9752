"""
CollectionProvider service - Resolve labelled jet collections.

Maps a (label, instance, process) collection label onto the kinematic
branches of a tree and builds the jets of one event from them.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from domain.errors import MissingCollectionError
from domain.events import Event, Jet
from services.calculations import consts, physics_calcs


class CollectionProvider(ABC):
    """
    Base class for collection providers.

    A provider looks up the jets of one event by collection label.
    """

    @abstractmethod
    def get_jets(
        self,
        event: Event,
        label: str,
        instance: str = "",
        process: str = ""
    ) -> tuple[Jet, ...]:
        """
        Get the ordered jets of a collection for one event.

        Raises:
            MissingCollectionError: If the collection is absent for the event
        """

    def candidate_branches(
        self,
        branch_names: Iterable[str],
        label: str,
        instance: str = "",
        process: str = ""
    ) -> Optional[list[str]]:
        """
        Branches the collection may be read from, or None to read everything.
        """
        return None


class BranchCollectionProvider(CollectionProvider):
    """
    Provider for flat trees where each jet quantity is its own branch.

    Branch bases are tried in order ``label_instance_process``,
    ``label_process`` and ``label``, each joined to the field name with
    ``_`` (NanoAOD-style) or ``.`` (ATLAS-style).
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._cache: dict[tuple, Optional[tuple[str, dict[str, str]]]] = {}

    def get_jets(
        self,
        event: Event,
        label: str,
        instance: str = "",
        process: str = ""
    ) -> tuple[Jet, ...]:
        resolved = self.resolve(event.fields, label, instance, process)
        if resolved is None:
            raise MissingCollectionError(label, instance, process)

        coordinate_system, branch_mapping = resolved
        absent = [
            branch for branch in branch_mapping.values()
            if event.branches.get(branch) is None
        ]
        if absent:
            raise MissingCollectionError(
                label, instance, process,
                reason=f"absent (branches {', '.join(absent)})"
            )

        components = {
            quantity: event.branches[branch]
            for quantity, branch in branch_mapping.items()
        }
        return physics_calcs.jets_from_components(components, coordinate_system)

    def candidate_branches(
        self,
        branch_names: Iterable[str],
        label: str,
        instance: str = "",
        process: str = ""
    ) -> Optional[list[str]]:
        resolved = self.resolve(branch_names, label, instance, process)
        if resolved is None:
            self.logger.warning(
                f"No branches found for collection ({label!r}, {instance!r}, {process!r})"
            )
            return []
        return list(resolved[1].values())

    def resolve(
        self,
        branch_names: Iterable[str],
        label: str,
        instance: str = "",
        process: str = ""
    ) -> Optional[tuple[str, dict[str, str]]]:
        """
        Resolve a collection label against available branch names.

        Returns:
            Tuple of (coordinate_system, {quantity: branch}), or None if
            no complete set of kinematic branches is found
        """
        available = frozenset(branch_names)
        key = (available, label, instance, process)
        if key not in self._cache:
            self._cache[key] = self._resolve_uncached(available, label, instance, process)
            if self._cache[key] is not None:
                system, mapping = self._cache[key]
                self.logger.debug(
                    f"Resolved ({label!r}, {instance!r}, {process!r}) "
                    f"to {system} branches {sorted(mapping.values())}"
                )
        return self._cache[key]

    @classmethod
    def _resolve_uncached(
        cls,
        available: frozenset,
        label: str,
        instance: str,
        process: str
    ) -> Optional[tuple[str, dict[str, str]]]:
        for base in cls._branch_base_candidates(label, instance, process):
            for separator in consts.BRANCH_SEPARATORS:
                for system, quantities in consts.KINEMATIC_SYSTEMS.items():
                    mapping = cls._match_fields(base, separator, quantities, available)
                    if mapping is not None:
                        return system, mapping
        return None

    @staticmethod
    def _branch_base_candidates(label: str, instance: str, process: str) -> list[str]:
        candidates = []
        for parts in ((label, instance, process), (label, process), (label,)):
            name = "_".join(part for part in parts if part)
            if name and name not in candidates:
                candidates.append(name)
        return candidates

    @staticmethod
    def _match_fields(
        base: str,
        separator: str,
        quantities: tuple[str, ...],
        available: frozenset
    ) -> Optional[dict[str, str]]:
        mapping = {}
        for quantity in quantities:
            branch = next(
                (
                    f"{base}{separator}{alias}"
                    for alias in consts.FIELD_ALIASES[quantity]
                    if f"{base}{separator}{alias}" in available
                ),
                None,
            )
            if branch is None:
                return None
            mapping[quantity] = branch
        return mapping
