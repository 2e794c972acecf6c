import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from .errors import CapacityExceeded, InvalidHandle, InvalidStart, UnknownSymbol

logger = logging.getLogger(__name__)

BINARY_ALPHABET = ('0', '1')
DEFAULT_MAX_STATES = 64


@dataclass(frozen=True)
class StateHandle:
    """
    Opaque reference to a state of one particular store.

    Handles compare by (owner, key). The key is never reused inside a store,
    so a handle keeps pointing at the same state across pruning, unlike the
    positional ``State.id``.
    """
    owner: object = field(repr=False)
    key: int


@dataclass(eq=False)
class State:
    handle: StateHandle
    id: int
    name: str
    is_final: bool
    transitions: Dict[str, Optional[StateHandle]]


class AutomatonStore:
    """
    Owns the states and edges of a single DFA.

    Args:
        alphabet: Ordered symbols. Every per-symbol loop in the pipeline
            follows this order.
        max_states: Upper bound on live states, or None for no bound.
    """

    def __init__(self, alphabet: Sequence[str] = BINARY_ALPHABET,
                 max_states: Optional[int] = DEFAULT_MAX_STATES):
        alphabet = tuple(alphabet)
        if not alphabet:
            raise ValueError("Alphabet must contain at least one symbol")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError(f"Alphabet contains duplicate symbols: {list(alphabet)}")
        for symbol in alphabet:
            if not isinstance(symbol, str) or len(symbol) != 1:
                raise ValueError(f"Alphabet symbols must be single characters, got {symbol!r}")
        if max_states is not None and max_states < 0:
            raise ValueError("max_states must be non-negative or None")

        self.alphabet = alphabet
        self.max_states = max_states
        self._token = object()
        self._next_key = 0
        self._states: Dict[StateHandle, State] = {}

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, handle) -> bool:
        return isinstance(handle, StateHandle) and handle in self._states

    @property
    def states(self) -> List[State]:
        """Live states in store order."""
        return list(self._states.values())

    def handles(self) -> List[StateHandle]:
        return list(self._states)

    def state(self, handle: StateHandle) -> State:
        if handle not in self:
            raise InvalidHandle(f"{handle!r} is not a live state of this automaton")
        return self._states[handle]

    def find(self, name: str) -> Optional[StateHandle]:
        """First live state called ``name``, if any."""
        for state in self._states.values():
            if state.name == name:
                return state.handle
        return None

    def target(self, handle: StateHandle, symbol: str) -> Optional[StateHandle]:
        self._check_symbol(symbol)
        return self.state(handle).transitions[symbol]

    def add_state(self, name: str, is_final: bool = False) -> StateHandle:
        if self.max_states is not None and len(self._states) >= self.max_states:
            raise CapacityExceeded(
                f"Cannot add state '{name}': automaton already holds {self.max_states} states"
            )

        handle = StateHandle(self._token, self._next_key)
        self._next_key += 1
        self._states[handle] = State(
            handle=handle,
            id=len(self._states),
            name=name,
            is_final=bool(is_final),
            transitions={symbol: None for symbol in self.alphabet},
        )
        return handle

    def set_transition(self, source: StateHandle, symbol: str,
                       target: Optional[StateHandle]) -> None:
        """Record ``source --symbol--> target``, replacing any earlier edge."""
        self._check_symbol(symbol)
        state = self.state(source)
        if target is not None and target not in self:
            raise InvalidHandle(f"Transition target {target!r} is not a live state of this automaton")
        state.transitions[symbol] = target

    def reachable_from(self, start: StateHandle) -> Set[StateHandle]:
        if start not in self:
            raise InvalidStart(f"Start state {start!r} does not belong to this automaton")

        reachable = {start}
        queue = deque([start])
        while queue:
            current = self._states[queue.popleft()]
            for symbol in self.alphabet:
                target = current.transitions[symbol]
                if target is not None and target not in reachable:
                    reachable.add(target)
                    queue.append(target)
        return reachable

    def prune_unreachable(self, start: StateHandle) -> int:
        """
        Remove every state that cannot be reached from ``start``.

        Surviving states keep their handles; their positional ids are
        renumbered from 0 in store order. Edges into removed states become
        "no transition".

        Returns:
            int: Number of removed states.
        """
        reachable = self.reachable_from(start)

        survivors: Dict[StateHandle, State] = {}
        for handle, state in self._states.items():
            if handle not in reachable:
                continue
            for symbol in self.alphabet:
                if state.transitions[symbol] is not None and state.transitions[symbol] not in reachable:
                    state.transitions[symbol] = None
            state.id = len(survivors)
            survivors[handle] = state

        removed = len(self._states) - len(survivors)
        if removed:
            dropped = [s.name for h, s in self._states.items() if h not in reachable]
            logger.info("Pruned %d unreachable state(s): %s", removed, ", ".join(dropped))
        self._states = survivors
        logger.debug("%d state(s) remain after pruning", len(self._states))
        return removed

    def complete(self, sink_name: str = 'DEAD') -> Optional[StateHandle]:
        """
        Route every missing edge to a non-accepting sink state.

        Returns:
            The new sink's handle, or None if no edge was missing.
        """
        missing = [
            (state, symbol)
            for state in self._states.values()
            for symbol in self.alphabet
            if state.transitions[symbol] is None
        ]
        if not missing:
            return None

        names = {state.name for state in self._states.values()}
        name = sink_name
        counter = 1
        while name in names:
            name = f"{sink_name}_{counter}"
            counter += 1

        sink = self.add_state(name, is_final=False)
        for state, symbol in missing:
            state.transitions[symbol] = sink
        for symbol in self.alphabet:
            self._states[sink].transitions[symbol] = sink
        logger.info("Added sink state '%s' for %d missing transition(s)", name, len(missing))
        return sink

    def to_fsa(self, start: Optional[StateHandle]) -> Dict:
        """Export the live automaton as an FSA dictionary."""
        transitions = {}
        for state in self._states.values():
            transitions[state.name] = {
                symbol: [self._states[target].name]
                for symbol, target in state.transitions.items()
                if target is not None
            }
        return {
            'states': [state.name for state in self._states.values()],
            'alphabet': list(self.alphabet),
            'transitions': transitions,
            'startingState': self.state(start).name if start is not None else '',
            'acceptingStates': [state.name for state in self._states.values() if state.is_final],
        }

    def _check_symbol(self, symbol: str) -> None:
        if symbol not in self.alphabet:
            raise UnknownSymbol(f"Symbol {symbol!r} is not in the alphabet {list(self.alphabet)}")
