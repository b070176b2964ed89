"""
Random CNF instances for exercising the solver.

Planted instances are built around a hidden assignment, so they are
satisfiable by construction. Uniform k-SAT instances make no such promise.
Variables are named x1..xN and negation is written with a leading '!'.
"""
import json
from typing import Dict, List, Optional, Tuple

import numpy as np

from dpll_sat import NEGATION_MARKER


LITERAL_MAKES_CLAUSE_TRUE_PROB = 0.5


def variable_names(num_vars: int) -> List[str]:
    return [f"x{i + 1}" for i in range(num_vars)]


def _make_rng(seed) -> np.random.Generator:
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def generate_random_assignment(num_vars: int, rng: Optional[np.random.Generator] = None) -> Dict[str, bool]:
    """
    Generate a random boolean assignment x1..xN.

    Args:
        num_vars: Number of variables.
        rng: numpy random generator.

    Returns:
        Mapping from variable name (e.g., "x3") to True/False.
    """
    rng = _make_rng(rng)
    values = rng.choice([True, False], size=num_vars)
    return {name: bool(values[i]) for i, name in enumerate(variable_names(num_vars))}


def generate_sat_clause_from_assignment(
        assignment: Dict[str, bool],
        num_literals: int,
        rng: Optional[np.random.Generator] = None
) -> List[str]:
    """
    Create one clause that is satisfied by the given assignment.

    Each literal is made true with probability LITERAL_MAKES_CLAUSE_TRUE_PROB;
    the last literal is forced true if none of the others were.

    Args:
        assignment: Variable -> truth value.
        num_literals: Number of literals in the clause.
        rng: numpy random generator.

    Returns:
        List of literal strings like ["x1", "!x3", "x7"].
    """
    rng = _make_rng(rng)
    vars_list = list(assignment.keys())
    selected_vars = rng.choice(len(vars_list), size=num_literals, replace=False)
    clause = []
    clause_is_true = False

    for i, idx in enumerate(selected_vars):
        var = vars_list[idx]
        make_true = rng.random() < LITERAL_MAKES_CLAUSE_TRUE_PROB
        is_last = (i == num_literals - 1)
        if make_true or (is_last and not clause_is_true):
            clause.append(var if assignment[var] else f"{NEGATION_MARKER}{var}")
            clause_is_true = True
        else:
            clause.append(f"{NEGATION_MARKER}{var}" if assignment[var] else var)

    return clause


def _check_sizes(num_vars: int, num_clauses: int, clause_size: int) -> None:
    if num_vars < 1 or num_clauses < 0 or clause_size < 1:
        raise ValueError("num_vars and clause_size must be positive, num_clauses non-negative")
    if clause_size > num_vars:
        raise ValueError(f"clause_size {clause_size} exceeds num_vars {num_vars}")


def generate_planted_formula(
        num_vars: int,
        num_clauses: int,
        clause_size: int = 3,
        seed=None
) -> Tuple[List[List[str]], Dict[str, bool]]:
    """
    Generate a satisfiable CNF with the requested size.

    Args:
        num_vars: Number of variables.
        num_clauses: Number of clauses.
        clause_size: Literals per clause (e.g., 3 for 3-SAT).
        seed: Seed or numpy Generator.

    Returns:
        (clauses, planted assignment); the assignment satisfies every clause.
    """
    _check_sizes(num_vars, num_clauses, clause_size)
    rng = _make_rng(seed)
    assignment = generate_random_assignment(num_vars, rng)
    clauses = [
        generate_sat_clause_from_assignment(assignment, clause_size, rng)
        for _ in range(num_clauses)
    ]
    return clauses, assignment


def generate_random_ksat(num_vars: int, num_clauses: int, clause_size: int = 3, seed=None) -> List[List[str]]:
    """Uniform random k-SAT: distinct variables per clause, fair coin for each sign."""
    _check_sizes(num_vars, num_clauses, clause_size)
    rng = _make_rng(seed)
    names = variable_names(num_vars)
    clauses = []
    for _ in range(num_clauses):
        idxs = rng.choice(num_vars, size=clause_size, replace=False)
        signs = rng.random(clause_size) < 0.5
        clauses.append([f"{NEGATION_MARKER}{names[i]}" if neg else names[i]
                        for i, neg in zip(idxs, signs)])
    return clauses


def write_formula_file(path: str, clauses: List[List[str]]) -> None:
    """Write clauses as a one-line JSON formula file."""
    with open(path, 'w', encoding='utf-8') as f:
        f.write(json.dumps(clauses))
        f.write('\n')
