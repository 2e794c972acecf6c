import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .automaton_store import AutomatonStore, State, StateHandle
from .errors import InvalidHandle

logger = logging.getLogger(__name__)

# Target of a missing edge in a signature. Never equal to a partition id.
NO_TRANSITION = None

Signature = Tuple[Optional[int], ...]


@dataclass(frozen=True)
class Partition:
    id: int
    members: Tuple[StateHandle, ...]
    names: Tuple[str, ...]

    @property
    def label(self) -> str:
        return "{" + ",".join(self.names) + "}"

    def __len__(self):
        return len(self.members)


class PartitionRefiner:
    """
    Moore's partition refinement over the live states of a store.

    The refiner is the only writer of the state -> partition id map. It reads
    the store but never modifies it.

    Usage::

        refiner = PartitionRefiner(store)
        partitions = refiner.refine()
    """

    def __init__(self, store: AutomatonStore):
        self._store = store
        self.partitions: List[Partition] = []
        self.rounds = 0
        self._partition_of: Dict[StateHandle, int] = {}
        self._initialised = False

    def partition_of(self, handle: StateHandle) -> int:
        try:
            return self._partition_of[handle]
        except KeyError:
            raise InvalidHandle(f"{handle!r} is not assigned to any partition") from None

    def signature(self, handle: StateHandle) -> Signature:
        """Partition id reached on each symbol, in alphabet order."""
        state = self._store.state(handle)
        return tuple(
            NO_TRANSITION if target is None else self._partition_of[target]
            for target in (state.transitions[symbol] for symbol in self._store.alphabet)
        )

    def initial_partition(self) -> List[Partition]:
        """Split the live states into accepting and non-accepting classes."""
        accepting: List[State] = []
        rejecting: List[State] = []
        for state in self._store.states:
            (accepting if state.is_final else rejecting).append(state)

        self._install([group for group in (accepting, rejecting) if group])
        self.rounds = 0
        self._initialised = True

        logger.info("Initial partitions (%d): %s", len(self.partitions), self._describe())
        return self.partitions

    def refine_once(self) -> bool:
        """
        Run a single refinement round.

        Returns:
            bool: True if at least one partition was split.
        """
        if not self._initialised:
            self.initial_partition()

        groups: List[List[State]] = []
        split = False
        for partition in self.partitions:
            members = [self._store.state(handle) for handle in partition.members]
            if len(members) <= 1:
                groups.append(members)
                continue

            sub_groups = self._split(members)
            if len(sub_groups) > 1:
                split = True
            groups.extend(sub_groups)

        self.rounds += 1
        if split:
            self._install(groups)
            logger.info("Round %d refined partitions (%d): %s",
                        self.rounds, len(self.partitions), self._describe())
        else:
            logger.debug("Round %d left all %d partitions unchanged", self.rounds, len(self.partitions))
        return split

    def refine(self) -> List[Partition]:
        """Refine until a round makes no split and return the stable partitions."""
        if not self._initialised:
            self.initial_partition()

        while self.refine_once():
            pass

        logger.info("Stable after %d round(s) with %d partition(s)", self.rounds, len(self.partitions))
        return self.partitions

    def _split(self, members: List[State]) -> List[List[State]]:
        # First fit: a state joins the earliest sub-group whose seed has the same signature.
        seeds: List[Signature] = []
        sub_groups: List[List[State]] = []
        for state in members:
            signature = self.signature(state.handle)
            for index, seed in enumerate(seeds):
                if seed == signature:
                    sub_groups[index].append(state)
                    break
            else:
                seeds.append(signature)
                sub_groups.append([state])
        return sub_groups

    def _install(self, groups: List[List[State]]) -> None:
        self.partitions = [
            Partition(
                id=index,
                members=tuple(state.handle for state in group),
                names=tuple(state.name for state in group),
            )
            for index, group in enumerate(groups)
        ]
        self._partition_of = {
            handle: partition.id
            for partition in self.partitions
            for handle in partition.members
        }

    def _describe(self) -> str:
        return " ".join(f"{p.id}:{p.label}" for p in self.partitions)
