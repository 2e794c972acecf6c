from typing import Dict, List, NamedTuple, Optional, Sequence

from .automaton_store import AutomatonStore
from .partition_refiner import PartitionRefiner

NO_TRANSITION_LABEL = 'none'


class MinimisedState(NamedTuple):
    """One state of the minimised DFA, standing for a whole partition"""
    id: int
    label: str
    is_final: bool
    transitions: Dict[str, Optional[int]]

    @property
    def name(self) -> str:
        return state_name(self.id)

    def as_row(self) -> Dict:
        return {
            'label': f"{self.name} {self.label}",
            'isFinal': self.is_final,
            'transitions': {
                symbol: NO_TRANSITION_LABEL if target is None else state_name(target)
                for symbol, target in self.transitions.items()
            },
        }


def state_name(partition_id: int) -> str:
    return f"S{partition_id}"


def build_minimised_view(store: AutomatonStore, refiner: PartitionRefiner) -> List[MinimisedState]:
    """
    Project the refiner's partitions into minimised state records.

    The first member of each partition represents it. Accepting status and
    the partition reached on each symbol are the same for every member once
    refinement is stable.
    """
    minimised = []
    for partition in refiner.partitions:
        if not partition.members:
            continue

        representative = store.state(partition.members[0])
        transitions = {}
        for symbol in store.alphabet:
            target = representative.transitions[symbol]
            transitions[symbol] = None if target is None else refiner.partition_of(target)

        minimised.append(MinimisedState(
            id=partition.id,
            label=partition.label,
            is_final=representative.is_final,
            transitions=transitions,
        ))
    return minimised


def to_fsa(states: List[MinimisedState], alphabet: Sequence[str], start_partition: Optional[int]) -> Dict:
    """
    Express minimised states as an FSA dictionary.

    Args:
        states: Records from build_minimised_view
        alphabet: Symbols in order
        start_partition: Partition holding the original start state, or None
            for an empty automaton

    Returns:
        Dict: FSA dictionary whose state names are ``S<id>``
    """
    transitions = {}
    for state in states:
        transitions[state.name] = {
            symbol: [state_name(target)]
            for symbol, target in state.transitions.items()
            if target is not None
        }

    return {
        'states': [state.name for state in states],
        'alphabet': list(alphabet),
        'transitions': transitions,
        'startingState': state_name(start_partition) if start_partition is not None else '',
        'acceptingStates': [state.name for state in states if state.is_final],
    }


def format_transition_table(states: List[MinimisedState], alphabet: Sequence[str]) -> str:
    header = [f"{'State (Original States)':<25}"] + [f" {'Next on ' + repr(symbol):<15}" for symbol in alphabet]
    lines = ["|".join(header), "-" * (25 + 17 * len(alphabet))]

    for state in states:
        marker = '*' if state.is_final else ' '
        cells = [f"{state.name + ' ' + state.label + marker:<25}"]
        for symbol in alphabet:
            target = state.transitions[symbol]
            cells.append(f" {'-' if target is None else state_name(target):<15}")
        lines.append("|".join(cells))

    lines.append("(* indicates final state in minimised DFA)")
    return "\n".join(lines)
