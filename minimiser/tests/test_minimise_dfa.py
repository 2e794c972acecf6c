import logging
from unittest import mock

from django.test import TestCase
from minimiser.errors import CapacityExceeded, InvalidHandle, InvalidStart
from minimiser.fsa_equivalence import verify_minimisation
from minimiser.fsa_properties import is_connected, is_deterministic
from minimiser.fsa_simulation import accepts, words_up_to
from minimiser.fsa_transformations import (
    build_automaton,
    fsa_to_description,
    minimise,
    minimise_dfa,
    minimise_fsa,
    minimise_store,
    MinimisationReport,
)
from minimiser.tests.automata import FIRST_FIT, SIX_STATE, TWO_CLASS, describe


class TestMinimiseDFA(TestCase):
    """Test cases for DFA minimisation function"""

    def assertSameLanguage(self, original, minimised, max_length=6):
        for word in words_up_to(original['alphabet'], max_length):
            self.assertEqual(accepts(original, word), accepts(minimised, word),
                             f"Disagreement on string '{word}'")

    def test_simple_dfa_minimisation(self):
        """Test minimisation of a simple DFA with equivalent states"""
        # S0, S1 and S2 are all non-accepting and move to S3 on 'a' and to one another on 'b'
        dfa = {
            'states': ['S0', 'S1', 'S2', 'S3'],
            'alphabet': ['a', 'b'],
            'transitions': {
                'S0': {'a': ['S3'], 'b': ['S1']},
                'S1': {'a': ['S3'], 'b': ['S2']},
                'S2': {'a': ['S3'], 'b': ['S1']},
                'S3': {'a': ['S3'], 'b': ['S1']}
            },
            'startingState': 'S0',
            'acceptingStates': ['S3']
        }

        minimised = minimise_dfa(dfa)

        self.assertEqual(len(minimised['states']), 2)
        self.assertTrue(is_deterministic(minimised))
        self.assertEqual(minimised['alphabet'], ['a', 'b'])
        self.assertEqual(len(minimised['acceptingStates']), 1)
        self.assertSameLanguage(dfa, minimised)

    def test_dfa_minimisation_three_states(self):
        """Test minimisation of DFA where every state has a different distance to acceptance"""
        dfa = {
            'states': ['S0', 'S1', 'S2'],
            'alphabet': ['a', 'b'],
            'transitions': {
                'S0': {'a': ['S1'], 'b': ['S0']},
                'S1': {'a': ['S2'], 'b': ['S0']},
                'S2': {'a': ['S2'], 'b': ['S2']}
            },
            'startingState': 'S0',
            'acceptingStates': ['S2']
        }

        minimised = minimise_dfa(dfa)

        self.assertEqual(len(minimised['states']), 3)
        self.assertEqual(len(minimised['acceptingStates']), 1)
        self.assertSameLanguage(dfa, minimised)

    def test_already_minimal_dfa(self):
        dfa = {
            'states': ['S0', 'S1'],
            'alphabet': ['a', 'b'],
            'transitions': {
                'S0': {'a': ['S1'], 'b': ['S0']},
                'S1': {'a': ['S0'], 'b': ['S1']}
            },
            'startingState': 'S0',
            'acceptingStates': ['S1']
        }

        minimised = minimise_dfa(dfa)

        self.assertEqual(len(minimised['states']), 2)
        self.assertSameLanguage(dfa, minimised)

    def test_unreachable_states_removed(self):
        """States that cannot be reached never appear in the result"""
        dfa = {
            'states': ['S0', 'S1', 'S2', 'S3'],
            'alphabet': ['a', 'b'],
            'transitions': {
                'S0': {'a': ['S1'], 'b': ['S0']},
                'S1': {'a': ['S1'], 'b': ['S0']},
                'S2': {'a': ['S3'], 'b': ['S2']},
                'S3': {'a': ['S3'], 'b': ['S3']}
            },
            'startingState': 'S0',
            'acceptingStates': ['S1', 'S3']
        }

        report = minimise_fsa(dfa)

        self.assertEqual(report.pruned_states, 2)
        self.assertEqual([p.label for p in report.final_partitions], ['{S1}', '{S0}'])
        self.assertTrue(is_connected(report.to_fsa()))

    def test_empty_dfa(self):
        dfa = {
            'states': [],
            'alphabet': ['a'],
            'transitions': {},
            'startingState': '',
            'acceptingStates': []
        }

        minimised = minimise_dfa(dfa)

        self.assertEqual(minimised['states'], [])
        self.assertEqual(minimised['alphabet'], ['a'])
        self.assertEqual(minimised['startingState'], '')

    def test_nondeterministic_input_rejected(self):
        nfa = {
            'states': ['S0', 'S1'],
            'alphabet': ['a'],
            'transitions': {'S0': {'a': ['S0', 'S1']}, 'S1': {}},
            'startingState': 'S0',
            'acceptingStates': ['S1']
        }
        with self.assertRaises(ValueError):
            minimise_dfa(nfa)

    def test_partial_dfa_keeps_missing_transitions(self):
        """Missing transitions survive minimisation as missing transitions"""
        dfa = {
            'states': ['S0', 'S1', 'S2'],
            'alphabet': ['a', 'b'],
            'transitions': {
                'S0': {'a': ['S1']},
                'S1': {'b': ['S2']},
                'S2': {}
            },
            'startingState': 'S0',
            'acceptingStates': ['S2']
        }

        minimised = minimise_dfa(dfa)

        self.assertEqual(len(minimised['states']), 3)
        self.assertSameLanguage(dfa, minimised)
        start = minimised['startingState']
        self.assertNotIn('b', minimised['transitions'][start])


class TestMinimisationPipeline(TestCase):
    """Test cases for the descriptor based pipeline and its report"""

    def test_two_class_scenario(self):
        """q4 is pruned and {q2,q3} absorbs every transition"""
        report = minimise(*TWO_CLASS, start='q1')

        self.assertEqual(report.original_states, 4)
        self.assertEqual(report.pruned_states, 1)
        self.assertEqual([p.label for p in report.initial_partitions], ['{q2,q3}', '{q1}'])
        self.assertEqual([p.label for p in report.final_partitions], ['{q2,q3}', '{q1}'])
        self.assertEqual(report.start, 1)
        self.assertEqual(report.rows(), [
            {'label': 'S0 {q2,q3}', 'isFinal': True, 'transitions': {'0': 'S0', '1': 'S0'}},
            {'label': 'S1 {q1}', 'isFinal': False, 'transitions': {'0': 'S0', '1': 'S0'}},
        ])

    def test_single_state_scenario(self):
        report = minimise([{'name': 'q1', 'isFinal': False}], [], start='q1')

        self.assertEqual(report.pruned_states, 0)
        self.assertEqual(report.rows(), [
            {'label': 'S0 {q1}', 'isFinal': False, 'transitions': {'0': 'none', '1': 'none'}},
        ])

    def test_empty_automaton(self):
        report = minimise([], [], start=None)

        self.assertEqual(report.states, [])
        self.assertEqual(report.final_partitions, [])
        self.assertIsNone(report.start)

    def test_start_required_for_non_empty_automaton(self):
        with self.assertRaises(InvalidStart):
            build_automaton([{'name': 'q0', 'isFinal': True}], [], None)

        store, _ = build_automaton([{'name': 'q0', 'isFinal': True}], [], 'q0')
        with self.assertRaises(InvalidStart):
            minimise_store(store, None)

    def test_unknown_start_name(self):
        """A start name outside the automaton is a bad start, not a bad transition"""
        with self.assertRaises(InvalidStart):
            minimise([{'name': 'q1', 'isFinal': False}], [], start='zz')

    def test_non_bool_final_flag(self):
        with self.assertRaises(ValueError):
            minimise([{'name': 'q1', 'isFinal': 'false'}], [], start='q1')

    def test_table_logged_at_info(self):
        with self.assertLogs('minimiser.fsa_transformations', level='INFO') as logs:
            minimise(*TWO_CLASS, start='q1')
        self.assertTrue(any('Minimised DFA has 2 state(s)' in line for line in logs.output))

    def test_table_not_built_without_info_logging(self):
        logger = logging.getLogger('minimiser.fsa_transformations')
        with mock.patch.object(logger, 'isEnabledFor', return_value=False), \
                mock.patch.object(MinimisationReport, 'table') as table:
            minimise(*TWO_CLASS, start='q1')
        table.assert_not_called()

    def test_integer_symbols(self):
        """Symbols given as integers map onto the binary alphabet"""
        states, transitions = describe(['q0-', 'q1+'], [])
        transitions = [
            {'fromName': 'q0', 'symbol': 0, 'toName': 'q1'},
            {'fromName': 'q0', 'symbol': 1, 'toName': 'q0'},
            {'fromName': 'q1', 'symbol': 0, 'toName': 'q1'},
            {'fromName': 'q1', 'symbol': 1, 'toName': 'q0'},
        ]

        report = minimise(states, transitions, start='q0')

        self.assertEqual(report.to_fsa()['transitions']['S1'], {'0': ['S0'], '1': ['S1']})

    def test_unknown_state_name(self):
        states, _ = describe(['q0-'], [])
        transitions = [{'fromName': 'q0', 'symbol': '0', 'toName': 'q9'}]
        with self.assertRaises(InvalidHandle):
            minimise(states, transitions, start='q0')

    def test_capacity_limit(self):
        states, transitions = SIX_STATE
        with self.assertRaises(CapacityExceeded):
            minimise(states, transitions, start='q0', max_states=5)

        report = minimise(states, transitions, start='q0', max_states=None)
        self.assertEqual(len(report.states), 3)

    def test_soundness(self):
        """States merged into one partition accept exactly the same words"""
        for description, start in [(TWO_CLASS, 'q1'), (SIX_STATE, 'q0'), (FIRST_FIT, 's')]:
            store, start_handle = build_automaton(*description, start)
            report = minimise_store(store, start_handle)
            original = store.to_fsa(start_handle)

            for partition in report.final_partitions:
                for word in words_up_to(original['alphabet'], 6):
                    results = {
                        accepts(dict(original, startingState=name), word)
                        for name in partition.names
                    }
                    self.assertEqual(len(results), 1, f"{partition.label} disagrees on '{word}'")

    def test_minimality_of_complete_automata(self):
        """Every pair of minimised states can be told apart"""
        for description, start in [(TWO_CLASS, 'q1'), (SIX_STATE, 'q0'), (FIRST_FIT, 's')]:
            store, start_handle = build_automaton(*description, start)
            report = minimise_store(store, start_handle)

            verification = verify_minimisation(store.to_fsa(start_handle), report)

            self.assertTrue(verification['sound'])
            self.assertTrue(verification['minimal'], verification['equivalent_pairs'])

    def test_completion_makes_partial_automata_minimal(self):
        """With a sink, states differing only in missing edges merge"""
        # None of these states accepts anything, they only differ in which edges exist
        description = describe(
            ['p-', 'q-', 'r-'],
            [('p', '0', 'q'), ('p', '1', 'r'), ('r', '0', 'r')],
        )

        partial = minimise(*description, start='p')
        self.assertEqual(len(partial.states), 3)

        store, start_handle = build_automaton(*description, 'p')
        completed = minimise_store(store, start_handle, complete=True)
        verification = verify_minimisation(store.to_fsa(start_handle), completed)

        self.assertTrue(verification['sound'])
        self.assertTrue(verification['minimal'])
        self.assertEqual([p.label for p in completed.final_partitions], ['{p,q,r,DEAD}'])
        self.assertEqual(completed.rows(), [
            {'label': 'S0 {p,q,r,DEAD}', 'isFinal': False, 'transitions': {'0': 'S0', '1': 'S0'}},
        ])

    def test_independent_runs(self):
        """Two automata minimised side by side do not share state"""
        first_store, first_start = build_automaton(*TWO_CLASS, 'q1')
        second_store, second_start = build_automaton(*SIX_STATE, 'q0')

        second = minimise_store(second_store, second_start)
        first = minimise_store(first_store, first_start)

        self.assertEqual(len(first.states), 2)
        self.assertEqual(len(second.states), 3)
        self.assertEqual(len(first_store), 3)
        self.assertEqual(len(second_store), 6)

    def test_fsa_to_description(self):
        fsa = {
            'states': ['S0', 'S1'],
            'alphabet': ['a', 'b'],
            'transitions': {'S0': {'a': ['S1']}, 'S1': {}},
            'startingState': 'S0',
            'acceptingStates': ['S1']
        }

        states, transitions, start = fsa_to_description(fsa)

        self.assertEqual(states, [{'name': 'S0', 'isFinal': False}, {'name': 'S1', 'isFinal': True}])
        self.assertEqual(transitions, [{'fromName': 'S0', 'symbol': 'a', 'toName': 'S1'}])
        self.assertEqual(start, 'S0')

    def test_table(self):
        report = minimise(*SIX_STATE, start='q0')
        table = report.table()
        self.assertIn('S0 {q1,q2,q4}*', table)
        self.assertIn('S2 {q5}', table)
