from django.test import TestCase
from minimiser.fsa_equivalence import distinguishing_string, verify_minimisation
from minimiser.fsa_transformations import build_automaton, minimise_store
from minimiser.tests.automata import SIX_STATE, describe


class TestFsaEquivalence(TestCase):
    """Test cases for distinguishing states and verifying minimisation results"""

    def setUp(self):
        store, start = build_automaton(*SIX_STATE, 'q0')
        self.six_state = store.to_fsa(start)

    def test_equivalent_states(self):
        self.assertIsNone(distinguishing_string(self.six_state, 'q1', 'q2'))
        self.assertIsNone(distinguishing_string(self.six_state, 'q0', 'q3'))

    def test_acceptance_differs_immediately(self):
        self.assertEqual(distinguishing_string(self.six_state, 'q0', 'q1'), '')

    def test_shortest_distinguishing_word(self):
        self.assertEqual(distinguishing_string(self.six_state, 'q0', 'q5'), '1')
        self.assertEqual(distinguishing_string(self.six_state, 'q3', 'q5'), '1')

    def test_missing_transitions_act_as_sink(self):
        """A missing edge behaves like an edge into a rejecting sink"""
        fsa = {
            'states': ['p', 'q', 'r'],
            'alphabet': ['0', '1'],
            'transitions': {'p': {'0': ['q']}, 'q': {}, 'r': {'0': ['r'], '1': ['r']}},
            'startingState': 'p',
            'acceptingStates': []
        }
        self.assertIsNone(distinguishing_string(fsa, 'p', 'q'))
        self.assertIsNone(distinguishing_string(fsa, 'q', 'r'))

        fsa['acceptingStates'] = ['q']
        self.assertEqual(distinguishing_string(fsa, 'p', 'r'), '0')

    def test_verify_complete_automaton(self):
        store, start = build_automaton(*SIX_STATE, 'q0')
        report = minimise_store(store, start)

        verification = verify_minimisation(self.six_state, report)

        self.assertEqual(verification, {
            'sound': True,
            'minimal': True,
            'merge_violations': [],
            'equivalent_pairs': [],
        })

    def test_verify_partial_automaton(self):
        """Without completion, states that only differ in missing edges stay apart"""
        store, start = build_automaton(*describe(
            ['p-', 'q-', 'r-'],
            [('p', '0', 'q'), ('p', '1', 'r'), ('r', '0', 'r')],
        ), 'p')
        report = minimise_store(store, start)

        verification = verify_minimisation(store.to_fsa(start), report)

        self.assertTrue(verification['sound'])
        self.assertFalse(verification['minimal'])
        self.assertEqual(len(verification['equivalent_pairs']), 3)
