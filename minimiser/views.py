import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .automaton_store import BINARY_ALPHABET, DEFAULT_MAX_STATES
from .fsa_equivalence import verify_minimisation
from .fsa_properties import is_deterministic, validate_description, validate_fsa_structure
from .fsa_transformations import build_automaton, fsa_to_description, minimise_store

logger = logging.getLogger(__name__)


def _max_states():
    configured = getattr(settings, 'MINIMISER_MAX_STATES', DEFAULT_MAX_STATES)
    return configured or None


def _stats(fsa):
    return {
        'states_count': len(fsa['states']),
        'alphabet_size': len(fsa['alphabet']),
        'transitions_count': sum(
            len(targets) for edges in fsa['transitions'].values() for targets in edges.values()
        ),
        'accepting_states_count': len(fsa['acceptingStates'])
    }


def _read_automaton(data):
    """
    Pull state descriptors, transitions, start name and alphabet out of a
    request body holding either 'automaton' or 'fsa'.

    Returns:
        Tuple of (arguments for build_automaton, error message or None)
    """
    if data.get('automaton') is not None:
        automaton = data['automaton']
        validation = validate_description(automaton)
        if not validation['valid']:
            return None, validation['error']
        alphabet = automaton.get('alphabet')
        if alphabet is None:
            alphabet = BINARY_ALPHABET
        return (automaton['states'], automaton.get('transitions', []), automaton.get('start'), alphabet), None

    fsa = data.get('fsa')
    if not fsa:
        return None, 'Missing FSA definition'

    validation = validate_fsa_structure(fsa)
    if not validation['valid']:
        return None, validation['error']

    if not is_deterministic(fsa):
        return None, ('DFA minimisation requires a deterministic FSA. '
                      'The provided FSA is non-deterministic.')

    states, transitions, start = fsa_to_description(fsa)
    return (states, transitions, start, fsa['alphabet']), None


@csrf_exempt
@require_POST
def min_dfa(request):
    """
    Django view to handle DFA minimisation requests.

    Expects a POST request with a JSON body containing either:
    - automaton: state descriptors, transition triples and a start name
    - fsa: The FSA definition in the proper format (must be deterministic)
    and optionally:
    - complete: route missing transitions to a sink state before minimising

    Returns a JSON response with the minimised DFA, its transition table and
    the partitions before and after refinement.
    """
    try:
        data = json.loads(request.body)
        if not isinstance(data, dict):
            return JsonResponse({'error': 'Request body must be a JSON object'}, status=400)

        arguments, error = _read_automaton(data)
        if error:
            return JsonResponse({'error': error}, status=400)
        states, transitions, start, alphabet = arguments

        complete = data.get('complete', False)
        if not isinstance(complete, bool):
            return JsonResponse({'error': 'complete must be true or false'}, status=400)

        store, start_handle = build_automaton(states, transitions, start, alphabet, _max_states())
        original_fsa = store.to_fsa(start_handle)

        report = minimise_store(store, start_handle, complete=complete)
        minimised_fsa = report.to_fsa()
        verification = verify_minimisation(store.to_fsa(start_handle), report)

        original_stats = _stats(original_fsa)
        minimised_stats = _stats(minimised_fsa)
        states_reduced = original_stats['states_count'] - minimised_stats['states_count']

        return JsonResponse({
            'minimised_fsa': minimised_fsa,
            'table': report.rows(),
            'partitions': {
                'initial': [p.label for p in report.initial_partitions],
                'final': [p.label for p in report.final_partitions],
            },
            'pruned_states': report.pruned_states,
            'refinement_rounds': report.rounds,
            'original_stats': original_stats,
            'minimised_stats': minimised_stats,
            'reduction_stats': {
                'states_reduced': states_reduced,
                'states_reduction_percentage': round(
                    states_reduced / original_stats['states_count'] * 100, 2
                ) if original_stats['states_count'] > 0 else 0,
            },
            'equivalence_verified': verification['sound'],
            'minimal': verification['minimal'],
        })

    except json.JSONDecodeError:
        return JsonResponse({'error': 'Invalid JSON'}, status=400)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)
    except Exception as e:
        logger.exception("DFA minimisation failed")
        return JsonResponse({'error': f'Server error: {str(e)}'}, status=500)
