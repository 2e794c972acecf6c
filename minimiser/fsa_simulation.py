from itertools import product
from typing import Dict, Iterator, List, Sequence, Tuple


def simulate_deterministic_fsa(fsa: Dict, input_symbols: Sequence[str]) -> Dict:
    """
    Runs a deterministic FSA over a word.

    A missing transition rejects the word at the position where it occurs.

    Args:
        fsa: An FSA dictionary
        input_symbols: The word, as a string or a sequence of symbols

    Returns:
        Dict:
        {
            'accepted': bool,
            'path': [(current_state, symbol, next_state), ...],
            'rejection_reason': str,  # only when rejected
            'rejection_position': int  # only when rejected
        }
    """
    path: List[Tuple[str, str, str]] = []

    current = fsa.get('startingState')
    if not current:
        return _rejected(path, 'FSA has no starting state', 0)

    for position, symbol in enumerate(input_symbols):
        if symbol not in fsa['alphabet']:
            return _rejected(path, f"Symbol '{symbol}' not in alphabet", position)

        targets = fsa['transitions'].get(current, {}).get(symbol, [])
        if not targets:
            return _rejected(
                path, f"No transition defined for symbol '{symbol}' from state '{current}'", position
            )
        if len(targets) > 1:
            return _rejected(
                path, f"Non-deterministic transition on '{symbol}' from state '{current}'", position
            )

        path.append((current, symbol, targets[0]))
        current = targets[0]

    if current in fsa['acceptingStates']:
        return {'accepted': True, 'path': path}
    return _rejected(path, f"Final state '{current}' is not an accepting state", len(input_symbols))


def accepts(fsa: Dict, input_symbols: Sequence[str]) -> bool:
    return simulate_deterministic_fsa(fsa, input_symbols)['accepted']


def words_up_to(alphabet: Sequence[str], max_length: int) -> Iterator[str]:
    """Every word over ``alphabet`` of length 0 to ``max_length``, shortest first."""
    for length in range(max_length + 1):
        for letters in product(alphabet, repeat=length):
            yield "".join(letters)


def _rejected(path, reason: str, position: int) -> Dict:
    return {
        'accepted': False,
        'path': path,
        'rejection_reason': reason,
        'rejection_position': position,
    }
