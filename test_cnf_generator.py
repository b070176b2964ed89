#!/usr/bin/env python3
"""
Tests for random instance generation
"""

import os
import tempfile
import unittest

import numpy as np

from cnf_generator import (
    generate_planted_formula, generate_random_assignment, generate_random_ksat,
    generate_sat_clause_from_assignment, write_formula_file,
)
from dpll_sat import CNFFormula, Literal, check_satisfiability
from formula_io import load_formula


class TestPlantedFormulas(unittest.TestCase):

    def test_random_assignment(self):
        assignment = generate_random_assignment(5, np.random.default_rng(0))
        self.assertEqual(list(assignment), ['x1', 'x2', 'x3', 'x4', 'x5'])
        self.assertTrue(all(isinstance(v, bool) for v in assignment.values()))

    def test_clause_is_satisfied(self):
        rng = np.random.default_rng(1)
        assignment = generate_random_assignment(6, rng)
        for _ in range(50):
            clause = generate_sat_clause_from_assignment(assignment, 3, rng)
            self.assertEqual(len(clause), 3)
            self.assertTrue(check_satisfiability([clause], assignment))

    def test_planted_assignment_satisfies_formula(self):
        clauses, assignment = generate_planted_formula(10, 45, 3, seed=7)
        self.assertEqual(len(clauses), 45)
        self.assertTrue(check_satisfiability(clauses, assignment))
        for clause in clauses:
            variables = [Literal.from_token(tok).variable for tok in clause]
            self.assertEqual(len(set(variables)), 3)

    def test_seed_is_deterministic(self):
        first, _ = generate_planted_formula(8, 20, 3, seed=42)
        second, _ = generate_planted_formula(8, 20, 3, seed=42)
        self.assertEqual(first, second)

    def test_invalid_sizes(self):
        with self.assertRaises(ValueError):
            generate_planted_formula(2, 5, 3)
        with self.assertRaises(ValueError):
            generate_random_ksat(0, 5, 1)


class TestUniformKSAT(unittest.TestCase):

    def test_shape(self):
        clauses = generate_random_ksat(5, 12, 2, seed=3)
        self.assertEqual(len(clauses), 12)
        self.assertTrue(all(len(clause) == 2 for clause in clauses))
        self.assertLessEqual(CNFFormula(clauses).num_variables, 5)

    def test_write_and_load(self):
        clauses = generate_random_ksat(4, 6, 3, seed=5)
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = os.path.join(tmp_dir, 'formula.json')
            write_formula_file(path, clauses)
            formula = load_formula(path)
        self.assertEqual(formula.original_clauses, CNFFormula(clauses).clauses)


if __name__ == '__main__':
    unittest.main()
