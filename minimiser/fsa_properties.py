from typing import Dict, List, Optional
from collections import deque


def is_deterministic(fsa: Dict) -> bool:
    """
    Checks that every state has at most one target per symbol and no
    non-empty epsilon edges.

    Args:
        fsa: A dictionary representing the FSA with the following keys:
            - states: List of all states
            - alphabet: List of symbols in the alphabet
            - transitions: Dictionary of transitions
            - startingState: The starting state
            - acceptingStates: List of accepting states

    Returns:
        bool: True if the FSA is deterministic, False otherwise
    """
    transitions = fsa.get('transitions', {})
    for state in fsa.get('states', []):
        edges = transitions.get(state, {})
        if edges.get(''):
            return False
        for symbol in fsa.get('alphabet', []):
            if len(edges.get(symbol, [])) > 1:
                return False
    return True


def is_connected(fsa: Dict) -> bool:
    """
    Checks that every state is reachable from the starting state.

    An FSA without states is trivially connected.
    """
    if not fsa.get('states'):
        return True

    start = fsa.get('startingState')
    if not start or start not in fsa['states']:
        return False

    reachable = {start}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for symbol, targets in fsa.get('transitions', {}).get(current, {}).items():
            for target in targets:
                if target not in reachable:
                    reachable.add(target)
                    queue.append(target)

    return reachable >= set(fsa['states'])


def validate_fsa_structure(fsa: Dict) -> Dict:
    """
    Validates that an FSA dictionary has the keys and value types the
    minimiser needs.

    Args:
        fsa: The FSA dictionary to validate

    Returns:
        Dict: Validation result with 'valid' boolean and optional 'error' message
    """
    if not isinstance(fsa, dict):
        return {'valid': False, 'error': 'FSA must be a dictionary'}

    for key in ['states', 'alphabet', 'transitions', 'startingState', 'acceptingStates']:
        if key not in fsa:
            return {'valid': False, 'error': f'Missing required key: {key}'}

    expected_types = [
        ('states', list, 'a list'),
        ('alphabet', list, 'a list'),
        ('transitions', dict, 'a dictionary'),
        ('acceptingStates', list, 'a list'),
    ]
    for key, expected, description in expected_types:
        if not isinstance(fsa[key], expected):
            return {'valid': False, 'error': f'{key} must be {description}'}

    if not all(isinstance(state, str) for state in fsa['states']):
        return {'valid': False, 'error': 'states must be a list of state names'}

    states = set(fsa['states'])
    if states and fsa['startingState'] not in fsa['states']:
        return {'valid': False, 'error': 'Starting state not in states list'}

    for state in fsa['acceptingStates']:
        if state not in fsa['states']:
            return {'valid': False, 'error': f'Accepting state {state} not in states list'}

    for source, edges in fsa['transitions'].items():
        if source not in states:
            return {'valid': False, 'error': f'Transition source {source} not in states list'}
        if not isinstance(edges, dict):
            return {'valid': False, 'error': f'Transitions of state {source} must be a dictionary'}
        for symbol, targets in edges.items():
            if symbol and symbol not in fsa['alphabet']:
                return {'valid': False, 'error': f"Symbol '{symbol}' of state {source} not in alphabet"}
            if not isinstance(targets, list) or not all(isinstance(target, str) for target in targets):
                return {'valid': False, 'error': f"Transitions of state {source} on '{symbol}' must be a list of state names"}
            for target in targets:
                if target not in states:
                    return {'valid': False, 'error': f'Transition target {target} not in states list'}

    return {'valid': True}


def validate_description(description: Dict) -> Dict:
    """
    Validates the descriptor form of an automaton:
    ``{'states': [{'name', 'isFinal'}], 'transitions': [{'fromName', 'symbol', 'toName'}], 'start': name}``.

    Returns:
        Dict: Validation result with 'valid' boolean and optional 'error' message
    """
    if not isinstance(description, dict):
        return {'valid': False, 'error': 'Automaton must be a dictionary'}

    states = description.get('states')
    if not isinstance(states, list):
        return {'valid': False, 'error': 'states must be a list'}
    for index, state in enumerate(states):
        if not isinstance(state, dict) or not isinstance(state.get('name'), str):
            return {'valid': False, 'error': f'State {index} must have a string name'}
        if not isinstance(state.get('isFinal', False), bool):
            return {'valid': False, 'error': f'isFinal of state {index} must be true or false'}

    transitions = description.get('transitions', [])
    if not isinstance(transitions, list):
        return {'valid': False, 'error': 'transitions must be a list'}
    for index, transition in enumerate(transitions):
        missing = _missing_keys(transition, ['fromName', 'symbol', 'toName'])
        if missing:
            return {'valid': False, 'error': f'Transition {index} is missing {missing}'}
        if not isinstance(transition['fromName'], str) or not isinstance(transition['toName'], str):
            return {'valid': False, 'error': f'Transition {index} must name its states with strings'}
        if isinstance(transition['symbol'], bool) or not isinstance(transition['symbol'], (str, int)):
            return {'valid': False, 'error': f'Transition {index} must have a string or integer symbol'}

    if states and not isinstance(description.get('start'), str):
        return {'valid': False, 'error': 'start must name a state'}

    alphabet = description.get('alphabet')
    if alphabet is not None and not isinstance(alphabet, list):
        return {'valid': False, 'error': 'alphabet must be a list'}

    return {'valid': True}


def _missing_keys(item, keys: List[str]) -> Optional[str]:
    if not isinstance(item, dict):
        return ", ".join(keys)
    absent = [key for key in keys if key not in item]
    return ", ".join(absent) if absent else None
