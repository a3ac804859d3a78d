import io
import os
import tempfile
import unittest
from unittest.mock import patch

from cli import main

HERE = os.path.dirname(__file__)
BALANCED = os.path.join(HERE, 'balanced.txt')


class CliTestCase(unittest.TestCase):
    """Runs the terminal with scripted input and returns everything printed"""

    def run_cli(self, commands, argv=None, env=None):
        with patch('builtins.input', side_effect=commands), \
                patch('sys.stdout', new_callable=io.StringIO) as stdout:
            main(argv=[BALANCED] if argv is None else argv, env=env or {})
        return stdout.getvalue()


class TestCommands(CliTestCase):
    def test_loads_automaton_from_argument(self):
        output = self.run_cli(['list', 'exit'])

        self.assertIn('Loaded 1 automata: balanced', output)
        self.assertIn('balanced: empty_stack, 2 states, 5 transitions', output)
        self.assertTrue(output.rstrip().endswith('Goodbye!'))

    def test_accepts_and_rejects(self):
        output = self.run_cli(['test balanced aabb', 'test balanced aab', 'exit'])

        self.assertIn('Read word: aabb\nACCEPTED', output)
        self.assertIn('Read word: aab\nREJECTED', output)

    def test_missing_word_is_empty(self):
        output = self.run_cli(['test balanced', 'test balanced ε', 'exit'])
        self.assertEqual(output.count('Read word: ε\nACCEPTED'), 2)

    def test_declared_e_is_read_as_a_symbol(self):
        fd, path = tempfile.mkstemp(suffix='.txt')
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write("single:\nq f\ne\nZ\nq\nZ\nf\nF\nq e Z f Z\n")
        self.addCleanup(os.unlink, path)

        output = self.run_cli(['test single e', 'test single', 'exit'], argv=[path])

        self.assertIn('Read word: e\nACCEPTED', output)
        self.assertIn('Read word: ε\nREJECTED', output)

    def test_tick_limit_is_reported(self):
        output = self.run_cli(['ticks 2', 'test balanced aabb', 'ticks', 'exit'])

        self.assertIn('Tick limit set to 2', output)
        self.assertIn('UNDECIDED: Reached tick limit 2', output)
        self.assertIn('Tick limit: 2', output)

    def test_max_ticks_from_environment(self):
        output = self.run_cli(['test balanced aabb', 'exit'], env={'MAX_TICKS': '3'})
        self.assertIn('UNDECIDED', output)

    def test_trace_prints_derivation(self):
        output = self.run_cli(['trace balanced ab', 'trace balanced ba', 'exit'])

        self.assertIn('  (q, ab, Z)', output)
        self.assertIn('  (p, ε, ε)\nACCEPTED', output)
        self.assertIn('REJECTED', output)

    def test_debug_prints_ticks(self):
        output = self.run_cli(['debug on', 'test balanced ab', 'debug off', 'exit'])

        self.assertIn('Tick no. 1, current configs:', output)
        self.assertIn('Tick no. 3, current configs:', output)
        self.assertNotIn('Tick no. 4', output)

    def test_debug_from_environment_shows_definition(self):
        output = self.run_cli(['exit'], env={'DEBUG': '1'})
        self.assertIn('Defined automaton balanced:', output)
        self.assertIn('Acceptance:      empty_stack', output)

    def test_show_delete_and_clear(self):
        output = self.run_cli([
            'show balanced',
            'delete balanced',
            'show balanced',
            'load ' + BALANCED,
            'clear',
            'list',
            'exit',
        ])

        self.assertIn('q, a, ε → q, A', output)
        self.assertIn('Deleted: balanced', output)
        self.assertIn('Automaton not found: balanced', output)
        self.assertIn('Cleared', output)
        self.assertIn('Nothing loaded', output)

    def test_usage_and_unknown_commands(self):
        output = self.run_cli(['test', 'load', 'frobnicate', 'debug maybe', 'exit'], argv=[])

        self.assertIn('Usage: test <name> [word]', output)
        self.assertIn('Usage: load <filename>', output)
        self.assertIn('Unknown command: frobnicate', output)
        self.assertIn('Usage: debug on|off', output)

    def test_load_error_keeps_running(self):
        output = self.run_cli(['load does-not-exist.txt', 'exit'], argv=[])

        self.assertIn('Error:', output)
        self.assertIn('Goodbye!', output)

    def test_end_of_input_exits(self):
        output = self.run_cli([EOFError()])
        self.assertIn('Goodbye!', output)


class TestArguments(CliTestCase):
    def test_too_many_arguments(self):
        output = self.run_cli([], argv=['a.txt', 'b.txt'])
        self.assertIn('Expected at most one automaton path', output)
        self.assertNotIn('Goodbye!', output)

    def test_bad_max_ticks_falls_back_to_default(self):
        output = self.run_cli(['ticks', 'exit'], argv=[], env={'MAX_TICKS': 'many'})

        self.assertIn('Magazine Automaton Terminal', output)
        self.assertIn("Error: MAX_TICKS must be an integer, got 'many'", output)
        self.assertIn('Tick limit: 2000', output)
        self.assertIn('Goodbye!', output)

    def test_unreadable_automaton(self):
        output = self.run_cli([], argv=['does-not-exist.txt'])
        self.assertIn('Failed to read automaton does-not-exist.txt', output)


if __name__ == '__main__':
    unittest.main()
