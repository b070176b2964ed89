#!/usr/bin/env python3
"""
Tests for the command line front end
"""

import contextlib
import io
import json
import os
import tempfile
import unittest

from dpll_sat import solve_sat
from formula_io import load_formula
from solve_cli import EXIT_INPUT_ERROR, EXIT_OK, EXIT_SOLVER_ERROR, main, parse_args


class CLITestCase(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp_dir.cleanup()

    def write(self, name, text):
        path = os.path.join(self.tmp_dir.name, name)
        with open(path, 'w') as f:
            f.write(text)
        return path

    def run_main(self, argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(io.StringIO()):
            status = main(argv)
        return status, out.getvalue()


class TestArguments(CLITestCase):

    def test_config_defaults(self):
        cfg = self.write('cfg.json', json.dumps({'trace': True, 'max_variables': 5}))
        args = parse_args(['--cfg', cfg, 'solve', 'f.json'])
        self.assertTrue(args.trace)
        self.assertEqual(args.max_variables, 5)

    def test_command_line_wins(self):
        cfg = self.write('cfg.json', json.dumps({'max_variables': 5}))
        args = parse_args(['--cfg', cfg, 'solve', 'f.json', '--max_variables', '7'])
        self.assertEqual(args.max_variables, 7)

    def assert_rejected(self, argv):
        with contextlib.redirect_stderr(io.StringIO()) as err:
            with self.assertRaises(SystemExit) as ctx:
                parse_args(argv)
        self.assertEqual(ctx.exception.code, 2)
        self.assertIn("cannot load config", err.getvalue())

    def test_config_must_be_object(self):
        cfg = self.write('cfg.json', '[1, 2]')
        self.assert_rejected(['--cfg', cfg, 'solve', 'f.json'])

    def test_config_invalid_json(self):
        cfg = self.write('cfg.json', '{"trace": ')
        self.assert_rejected(['--cfg', cfg, 'solve', 'f.json'])

    def test_config_missing(self):
        cfg = os.path.join(self.tmp_dir.name, 'missing.json')
        self.assert_rejected(['--cfg', cfg, 'solve', 'f.json'])


class TestSolveCommand(CLITestCase):

    def test_sat(self):
        path = self.write('f.json', '[["a", "b"], ["!a", "c"]]')
        status, out = self.run_main(['solve', path])
        self.assertEqual(status, EXIT_OK)
        self.assertIn("Result: SAT", out)
        self.assertIn("Verification: OK", out)
        self.assertIn("  a = false", out)

    def test_unsat(self):
        path = self.write('f.txt', "(a) & (!a)")
        status, out = self.run_main(['solve', path])
        self.assertEqual(status, EXIT_OK)
        self.assertIn("Result: UNSAT", out)

    def test_trace(self):
        path = self.write('f.json', '[["a"]]')
        _, out = self.run_main(['solve', path, '--trace'])
        self.assertIn("Step 1: Check formula", out)
        self.assertIn("Step 2: Unit literal: a = true", out)

    def test_json_output(self):
        path = self.write('f.cnf', "p cnf 2 2\n1 2 0\n-1 0\n")
        _, out = self.run_main(['solve', path, '--json', '--trace'])
        data = json.loads(out.strip())
        self.assertTrue(data['satisfiable'])
        self.assertEqual(data['assignment'], {'1': False, '2': True})
        self.assertEqual(data['trace'][0]['kind'], 'check')

    def test_several_files(self):
        first = self.write('a.json', '[["a"]]')
        second = self.write('b.json', '[["a"], ["!a"]]')
        status, out = self.run_main(['solve', first, second])
        self.assertEqual(status, EXIT_OK)
        self.assertIn("Result: SAT", out)
        self.assertIn("Result: UNSAT", out)

    def test_bad_input(self):
        bad = self.write('bad.txt', "(a | )")
        status, _ = self.run_main(['solve', bad])
        self.assertEqual(status, EXIT_INPUT_ERROR)
        missing = os.path.join(self.tmp_dir.name, 'missing.json')
        status, _ = self.run_main(['solve', missing])
        self.assertEqual(status, EXIT_INPUT_ERROR)

    def test_bad_dimacs_header(self):
        path = self.write('f.cnf', "p cnf x 2\n1 0\n")
        status, _ = self.run_main(['solve', path])
        self.assertEqual(status, EXIT_INPUT_ERROR)

    def test_too_many_variables(self):
        path = self.write('f.json', '[["a", "b", "c"]]')
        status, _ = self.run_main(['solve', path, '--max_variables', '2'])
        self.assertEqual(status, EXIT_SOLVER_ERROR)


class TestGenerateCommand(CLITestCase):

    def test_planted_instances(self):
        out_dir = os.path.join(self.tmp_dir.name, 'instances')
        status, _ = self.run_main(['generate', '--out_dir', out_dir, '--samples', '3',
                                   '--vars', '6', '--clauses', '20', '--seed', '1'])
        self.assertEqual(status, EXIT_OK)
        files = sorted(os.listdir(out_dir))
        self.assertEqual(files, ['formula_00000.json', 'formula_00001.json', 'formula_00002.json'])
        for name in files:
            formula = load_formula(os.path.join(out_dir, name))
            self.assertEqual(len(formula), 20)
            self.assertIsNotNone(solve_sat(formula.original_clauses))

    def test_uniform_instances(self):
        out_dir = os.path.join(self.tmp_dir.name, 'uniform')
        status, _ = self.run_main(['generate', '--out_dir', out_dir, '--samples', '2',
                                   '--uniform', '--prefix', 'rand'])
        self.assertEqual(status, EXIT_OK)
        self.assertEqual(sorted(os.listdir(out_dir)), ['rand_00000.json', 'rand_00001.json'])


if __name__ == '__main__':
    unittest.main()
