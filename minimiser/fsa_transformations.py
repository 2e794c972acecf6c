import logging
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .automaton_store import BINARY_ALPHABET, DEFAULT_MAX_STATES, AutomatonStore, StateHandle
from .errors import InvalidHandle, InvalidStart
from .fsa_properties import is_deterministic
from .minimised_view import MinimisedState, build_minimised_view, format_transition_table, to_fsa
from .partition_refiner import Partition, PartitionRefiner

logger = logging.getLogger(__name__)


class MinimisationReport(NamedTuple):
    """Result of DFA minimisation with the intermediate partitions"""
    alphabet: Tuple[str, ...]
    original_states: int
    pruned_states: int
    initial_partitions: List[Partition]
    final_partitions: List[Partition]
    rounds: int
    states: List[MinimisedState]
    start: Optional[int]

    def rows(self) -> List[Dict]:
        return [state.as_row() for state in self.states]

    def to_fsa(self) -> Dict:
        return to_fsa(self.states, self.alphabet, self.start)

    def table(self) -> str:
        return format_transition_table(self.states, self.alphabet)


def build_automaton(states: Sequence[Dict], transitions: Sequence[Dict], start: Optional[str],
                    alphabet: Sequence[str] = BINARY_ALPHABET,
                    max_states: Optional[int] = DEFAULT_MAX_STATES) -> Tuple[AutomatonStore, Optional[StateHandle]]:
    """
    Build a store from state descriptors and transition triples.

    Args:
        states: ``[{'name': str, 'isFinal': bool}, ...]`` in store order
        transitions: ``[{'fromName': str, 'symbol': str | int, 'toName': str}, ...]``
        start: Name of the start state, or None when there are no states
        alphabet: Ordered symbols
        max_states: Capacity of the store, None for unbounded

    Returns:
        Tuple of the store and the start handle
    """
    store = AutomatonStore(alphabet=[str(symbol) for symbol in alphabet], max_states=max_states)

    handles: Dict[str, StateHandle] = {}
    for descriptor in states:
        is_final = descriptor.get('isFinal', False)
        if not isinstance(is_final, bool):
            raise ValueError(f"isFinal of state '{descriptor['name']}' must be true or false")
        handle = store.add_state(descriptor['name'], is_final)
        handles.setdefault(descriptor['name'], handle)

    for transition in transitions:
        source = _lookup(handles, transition['fromName'])
        target = _lookup(handles, transition['toName'])
        store.set_transition(source, str(transition['symbol']), target)

    start_handle = None
    if states:
        if start not in handles:
            raise InvalidStart(f"Start state '{start}' does not belong to this automaton")
        start_handle = handles[start]
    return store, start_handle


def minimise_store(store: AutomatonStore, start: Optional[StateHandle], complete: bool = False) -> MinimisationReport:
    """
    Run the minimisation pipeline on a store.

    The store is pruned (and completed with a sink if ``complete`` is set) in
    place. With no start handle the store must be empty.
    """
    original = len(store)
    pruned = 0
    if start is not None:
        pruned = store.prune_unreachable(start)
        logger.info("Pruning kept %d of %d state(s)", len(store), original)
    elif original:
        raise InvalidStart("A start state is required for a non-empty automaton")

    if complete:
        store.complete()

    refiner = PartitionRefiner(store)
    initial = list(refiner.initial_partition())
    final = refiner.refine()

    minimised = build_minimised_view(store, refiner)
    report = MinimisationReport(
        alphabet=store.alphabet,
        original_states=original,
        pruned_states=pruned,
        initial_partitions=initial,
        final_partitions=list(final),
        rounds=refiner.rounds,
        states=minimised,
        start=refiner.partition_of(start) if start is not None else None,
    )
    if logger.isEnabledFor(logging.INFO):
        logger.info("Minimised DFA has %d state(s)\n%s", len(minimised), report.table())
    return report


def minimise(states: Sequence[Dict], transitions: Sequence[Dict], start: Optional[str],
             alphabet: Sequence[str] = BINARY_ALPHABET,
             max_states: Optional[int] = DEFAULT_MAX_STATES,
             complete: bool = False) -> MinimisationReport:
    """Minimise an automaton given as state descriptors and transition triples."""
    store, start_handle = build_automaton(states, transitions, start, alphabet, max_states)
    return minimise_store(store, start_handle, complete=complete)


def fsa_to_description(fsa: Dict) -> Tuple[List[Dict], List[Dict], Optional[str]]:
    """
    Convert an FSA dictionary into state descriptors, transition triples and
    a start name.
    """
    accepting = set(fsa['acceptingStates'])
    states = [{'name': name, 'isFinal': name in accepting} for name in fsa['states']]

    transitions = []
    for source in fsa['states']:
        edges = fsa['transitions'].get(source, {})
        for symbol in fsa['alphabet']:
            targets = edges.get(symbol, [])
            if targets:
                transitions.append({'fromName': source, 'symbol': symbol, 'toName': targets[0]})

    return states, transitions, fsa['startingState'] or None


def minimise_fsa(fsa: Dict, max_states: Optional[int] = DEFAULT_MAX_STATES,
                 complete: bool = False) -> MinimisationReport:
    """
    Minimise an automaton given as an FSA dictionary.

    Raises:
        ValueError: If the FSA is not deterministic
    """
    if not is_deterministic(fsa):
        raise ValueError("DFA minimisation requires a deterministic FSA.")

    states, transitions, start = fsa_to_description(fsa)
    return minimise(states, transitions, start, alphabet=fsa['alphabet'],
                    max_states=max_states, complete=complete)


def minimise_dfa(fsa: Dict) -> Dict:
    """
    Minimises a deterministic finite automaton using Moore's partition refinement.

    Args:
        fsa (Dict): A dictionary representing the DFA.

    Returns:
        Dict: A minimised DFA in the same format, with states named ``S<id>``.
    """
    # Empty DFA (represents empty language)
    if not fsa['states']:
        return {
            'states': [],
            'alphabet': fsa['alphabet'][:],
            'transitions': {},
            'startingState': '',
            'acceptingStates': []
        }

    return minimise_fsa(fsa, max_states=None).to_fsa()


def _lookup(handles: Dict[str, StateHandle], name: str) -> StateHandle:
    try:
        return handles[name]
    except KeyError:
        raise InvalidHandle(f"No state named '{name}'") from None
