from collections import deque
from typing import Dict, Optional, Set, Tuple


def _step(fsa: Dict, state: Optional[str], symbol: str) -> Optional[str]:
    # None is an implicit rejecting sink
    if state is None:
        return None
    targets = fsa['transitions'].get(state, {}).get(symbol, [])
    return targets[0] if targets else None


def _accepting(fsa: Dict, state: Optional[str]) -> bool:
    return state is not None and state in fsa['acceptingStates']


def distinguishing_string(fsa: Dict, first: str, second: str) -> Optional[str]:
    """
    Find the shortest word accepted from exactly one of two states.

    Missing transitions lead to an implicit rejecting sink, so two states are
    indistinguishable exactly when they recognise the same language.

    Args:
        fsa: A deterministic FSA dictionary
        first: Name of the first state
        second: Name of the second state

    Returns:
        The shortest distinguishing word, or None if the states are equivalent.
    """
    if _accepting(fsa, first) != _accepting(fsa, second):
        return ''

    seen: Set[Tuple[Optional[str], Optional[str]]] = {(first, second)}
    queue = deque([(first, second, '')])

    while queue:
        left, right, word = queue.popleft()
        for symbol in fsa['alphabet']:
            pair = (_step(fsa, left, symbol), _step(fsa, right, symbol))
            if pair in seen or pair[0] == pair[1]:
                continue
            if _accepting(fsa, pair[0]) != _accepting(fsa, pair[1]):
                return word + symbol
            seen.add(pair)
            queue.append((pair[0], pair[1], word + symbol))

    return None


def verify_minimisation(original_fsa: Dict, report) -> Dict:
    """
    Check a minimisation report against the automaton it was computed from.

    ``sound`` holds when every pair of merged original states is
    indistinguishable. ``minimal`` holds when every pair of minimised states
    is distinguishable. Wrongly merged pairs are listed with the word that
    tells them apart; equivalent minimised pairs are listed with None.

    Args:
        original_fsa: The pruned input automaton as an FSA dictionary
        report: A MinimisationReport

    Returns:
        Dict with 'sound', 'minimal', 'merge_violations' and 'equivalent_pairs'
    """
    merge_violations = []
    for partition in report.final_partitions:
        representative = partition.names[0]
        for other in partition.names[1:]:
            word = distinguishing_string(original_fsa, representative, other)
            if word is not None:
                merge_violations.append((representative, other, word))

    minimised_fsa = report.to_fsa()
    names = minimised_fsa['states']
    equivalent_pairs = []
    for index, first in enumerate(names):
        for second in names[index + 1:]:
            if distinguishing_string(minimised_fsa, first, second) is None:
                equivalent_pairs.append((first, second, None))

    return {
        'sound': not merge_violations,
        'minimal': not equivalent_pairs,
        'merge_violations': merge_violations,
        'equivalent_pairs': equivalent_pairs,
    }
