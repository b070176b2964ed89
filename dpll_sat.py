#!/usr/bin/env python3
"""
Traced DPLL SAT Solver

A SAT solver for formulas in conjunctive normal form based on the
Davis-Putnam-Logemann-Loveland procedure: unit propagation, pure literal
elimination and branching on the most frequent variable, with chronological
backtracking. Every decision point is appended to a trace so that a run can be
replayed, rendered or inspected in tests after the fact.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

NEGATION_MARKER = '!'

Variable = Union[str, int]
Assignment = Dict[Variable, bool]


class SATError(Exception):
    """Base class for all errors raised by the solver."""


class MalformedFormulaError(SATError, ValueError):
    """Raised when a literal token or clause cannot be turned into a Literal."""


class FormulaTooLargeError(SATError):
    """Raised when a formula has more variables than the solver was allowed."""


class SolverInvariantError(SATError):
    """Raised when the search returns a model that does not satisfy the input."""


class Literal(NamedTuple):
    """A variable together with its polarity."""

    variable: Variable
    negated: bool = False

    @classmethod
    def from_token(cls, token: Any) -> 'Literal':
        """
        Convert a literal token into a Literal.

        Args:
            token: A string optionally prefixed with '!', a non-zero signed
                   integer (DIMACS style, -n is the negation of n), or a Literal.

        Returns:
            The corresponding Literal.

        Raises:
            MalformedFormulaError: if the token is empty, zero, or of an
                                   unsupported type.
        """
        if isinstance(token, Literal):
            return token
        if isinstance(token, bool):
            raise MalformedFormulaError(f"Boolean is not a literal: {token!r}")
        if isinstance(token, int):
            if token == 0:
                raise MalformedFormulaError("0 is not a literal")
            return cls(abs(token), token < 0)
        if isinstance(token, str):
            negated = token.startswith(NEGATION_MARKER)
            name = token[len(NEGATION_MARKER):] if negated else token
            if not name or name.startswith(NEGATION_MARKER):
                raise MalformedFormulaError(f"Malformed literal: {token!r}")
            return cls(name, negated)
        raise MalformedFormulaError(f"Unsupported literal token: {token!r}")

    def is_satisfied_by(self, value: bool) -> bool:
        """True if the literal evaluates to true when its variable is `value`."""
        return value != self.negated

    def to_token(self) -> Union[str, int]:
        """Inverse of from_token: integers stay signed integers, names get '!'."""
        if isinstance(self.variable, int):
            return -self.variable if self.negated else self.variable
        return f"{NEGATION_MARKER}{self.variable}" if self.negated else self.variable

    def __str__(self) -> str:
        return f"{NEGATION_MARKER}{self.variable}" if self.negated else str(self.variable)


Clause = List[Literal]


def normalize_clauses(clauses: Iterable[Iterable[Any]]) -> List[Clause]:
    """Convert a sequence of token sequences into a list of Literal lists."""
    return [[Literal.from_token(token) for token in clause] for clause in clauses]


def check_satisfiability(clauses: Iterable[Iterable[Any]], assignment: Assignment) -> bool:
    """
    Check whether an assignment satisfies every clause of a formula.

    A clause counts as satisfied only if one of its literals has an assigned
    variable and evaluates to true. Unassigned variables never satisfy a clause.

    Args:
        clauses: Clauses as Literal lists or literal token lists.
        assignment: Variable -> truth value.

    Returns:
        True if every clause is satisfied.
    """
    for clause in clauses:
        clause_satisfied = False
        for token in clause:
            lit = Literal.from_token(token)
            if lit.variable in assignment and lit.is_satisfied_by(assignment[lit.variable]):
                clause_satisfied = True
                break
        if not clause_satisfied:
            return False
    return True


class CNFFormula:
    """Represents a CNF (Conjunctive Normal Form) formula."""

    def __init__(self, clauses: Iterable[Iterable[Any]]):
        """
        Initialize CNF formula.

        Args:
            clauses: List of clauses, where each clause is a list of literal
                     tokens. A token is a variable name optionally prefixed
                     with '!', a non-zero signed integer, or a Literal.
        """
        self.clauses = normalize_clauses(clauses)
        self.original_clauses = [clause[:] for clause in self.clauses]
        self.variables = self._collect_variables()
        self.num_variables = len(self.variables)

    def _collect_variables(self) -> List[Variable]:
        """Variables in order of first occurrence."""
        seen = {}
        for clause in self.clauses:
            for lit in clause:
                seen.setdefault(lit.variable, None)
        return list(seen)

    def is_satisfied(self, assignment: Assignment) -> bool:
        """Check if the formula is satisfied by the given assignment."""
        return check_satisfiability(self.original_clauses, assignment)

    def __len__(self) -> int:
        return len(self.clauses)

    def __repr__(self) -> str:
        return f"CNFFormula(num_clauses={len(self.clauses)}, num_variables={self.num_variables})"


def has_empty_clause(clauses: Sequence[Clause]) -> bool:
    return any(len(clause) == 0 for clause in clauses)


def substitute(clauses: Sequence[Clause], variable: Variable, value: bool) -> List[Clause]:
    """
    Simplify clauses given a variable assignment.

    Clauses containing a literal made true by the assignment are dropped.
    Literals made false are removed; a clause left without literals is kept
    as an empty clause so the caller can detect the conflict. Clause and
    literal order is preserved.

    Args:
        clauses: List of clauses to simplify
        variable: Variable to assign
        value: Value to assign to variable (True/False)

    Returns:
        Simplified list of clauses.
    """
    new_clauses = []

    for clause in clauses:
        new_clause = []
        satisfied = False
        for lit in clause:
            if lit.variable != variable:
                new_clause.append(lit)
            elif lit.is_satisfied_by(value):
                satisfied = True
                break
        if not satisfied:
            new_clauses.append(new_clause)

    return new_clauses


def find_pure_literal(clauses: Sequence[Clause], assignment: Assignment) -> Optional[Literal]:
    """
    Find the next unassigned variable that occurs with a single polarity.

    Variables occurring only positively come first, then variables occurring
    only negatively, each group in order of first occurrence.

    Returns:
        The pure literal (its polarity is the one observed), or None.
    """
    positive: Dict[Variable, None] = {}
    negative: Dict[Variable, None] = {}
    for clause in clauses:
        for lit in clause:
            (negative if lit.negated else positive).setdefault(lit.variable, None)

    for var in positive:
        if var not in negative and var not in assignment:
            return Literal(var, False)
    for var in negative:
        if var not in positive and var not in assignment:
            return Literal(var, True)
    return None


def select_variable(clauses: Sequence[Clause]) -> Optional[Variable]:
    """
    Choose the next variable to branch on.

    Picks the variable with the most literal occurrences (either polarity).
    Ties go to the variable met first while scanning the clauses in order.

    Returns:
        Variable to branch on, or None if the clauses contain no literals.
    """
    var_freq: Dict[Variable, int] = {}
    for clause in clauses:
        for lit in clause:
            var_freq[lit.variable] = var_freq.get(lit.variable, 0) + 1

    best_var, best_count = None, 0
    for var, count in var_freq.items():
        if count > best_count:
            best_var, best_count = var, count
    return best_var


class TraceKind(str, Enum):
    """Kinds of events recorded by the solver."""

    CHECK = 'check'
    UNIT = 'unit'
    PURE = 'pure'
    BRANCH = 'branch'
    BACKTRACK = 'backtrack'
    CONFLICT = 'conflict'


@dataclass(frozen=True)
class TraceEvent:
    """One solver step with a snapshot of the formula and assignment at that moment."""

    kind: TraceKind
    formula: Tuple[Tuple[Literal, ...], ...]
    assignment: Assignment
    variable: Optional[Variable] = None
    value: Optional[bool] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form with literals rendered as tokens."""
        event = {
            'kind': self.kind.value,
            'formula': [[lit.to_token() for lit in clause] for clause in self.formula],
            'assignment': dict(self.assignment),
        }
        if self.variable is not None:
            event['variable'] = self.variable
            event['value'] = self.value
        if self.reason is not None:
            event['reason'] = self.reason
        return event


class TraceRecorder:
    """Append-only log of solver events. The solver writes to it and never reads it."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._events: List[TraceEvent] = []

    def clear(self) -> None:
        self._events = []

    def record(self, kind: TraceKind, clauses: Sequence[Clause], assignment: Assignment,
               variable: Optional[Variable] = None, value: Optional[bool] = None,
               reason: Optional[str] = None) -> None:
        if not self.enabled:
            return
        # Snapshot by value; the caller keeps mutating its own copies.
        snapshot = tuple(tuple(clause) for clause in clauses)
        self._events.append(TraceEvent(kind, snapshot, dict(assignment), variable, value, reason))

    def count(self, kind: TraceKind) -> int:
        return sum(1 for event in self._events if event.kind == kind)

    @property
    def events(self) -> List[TraceEvent]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)


class DPLLSolver:
    """
    A DPLL-based SAT solver that records its decisions.

    Each recursive call owns its own copy of the clauses and the assignment, so
    a failed branch is discarded simply by returning from it.
    """

    def __init__(self, formula: Union[CNFFormula, Iterable[Iterable[Any]]],
                 complete_assignment: bool = True, max_variables: Optional[int] = None,
                 record_trace: bool = True):
        """
        Initialize the solver with a CNF formula.

        Args:
            formula: A CNFFormula, or clauses of literal tokens.
            complete_assignment: Assign False to input variables the search left
                                 unassigned, so the model covers every variable.
            max_variables: Refuse formulas with more variables than this. The
                           recursion depth grows with the number of variables.
            record_trace: Record trace events while solving.
        """
        if not isinstance(formula, CNFFormula):
            formula = CNFFormula(formula)
        self.formula = formula
        self.complete_assignment = complete_assignment
        self.max_variables = max_variables
        self.trace = TraceRecorder(enabled=record_trace)

    def solve(self) -> Optional[Assignment]:
        """
        Solve the SAT problem.

        Returns:
            A satisfying assignment if SAT, None if UNSAT.

        Raises:
            FormulaTooLargeError: if the formula exceeds max_variables.
            SolverInvariantError: if the search produced an invalid model.
        """
        self.trace.clear()

        if self.max_variables is not None and self.formula.num_variables > self.max_variables:
            raise FormulaTooLargeError(
                f"Formula has {self.formula.num_variables} variables, "
                f"limit is {self.max_variables}")

        logger.debug("Solving formula with %d variables and %d clauses",
                     self.formula.num_variables, len(self.formula.clauses))

        result = self._dpll([clause[:] for clause in self.formula.clauses], {})

        if result is not None:
            if self.complete_assignment:
                for var in self.formula.variables:
                    result.setdefault(var, False)
            # Verify the solution
            if not self.formula.is_satisfied(result):
                raise SolverInvariantError("Invalid solution found!")

        logger.debug("Finished with %s after %d trace events",
                     "SAT" if result is not None else "UNSAT", len(self.trace))
        return result

    def get_trace(self) -> List[TraceEvent]:
        """Events recorded by the most recent call to solve()."""
        return self.trace.events

    def _dpll(self, clauses: List[Clause], assignment: Assignment) -> Optional[Assignment]:
        """
        DPLL search over one branch.

        Args:
            clauses: Current set of clauses
            assignment: Current partial assignment

        Returns:
            A satisfying assignment if SAT, None if UNSAT.
        """
        self.trace.record(TraceKind.CHECK, clauses, assignment)

        if len(clauses) == 0:
            return assignment

        if has_empty_clause(clauses):
            self.trace.record(TraceKind.BACKTRACK, clauses, assignment,
                              reason="Empty clause found")
            return None

        clauses, assignment = self.unit_propagate(clauses, assignment)
        if clauses is None:
            return None

        clauses, assignment = self.eliminate_pure(clauses, assignment)

        var = select_variable(clauses)
        if var is None:
            if clauses:
                logger.error("No branching variable left but %d clauses remain", len(clauses))
                return None
            return assignment

        for value in (True, False):
            self.trace.record(TraceKind.BRANCH, clauses, assignment, variable=var, value=value)
            logger.debug("Branch %s = %s at depth %d", var, value, len(assignment))

            new_assignment = assignment.copy()
            new_assignment[var] = value
            result = self._dpll(substitute(clauses, var, value), new_assignment)
            if result is not None:
                return result

        return None

    def unit_propagate(self, clauses: List[Clause],
                       assignment: Assignment) -> Tuple[Optional[List[Clause]], Assignment]:
        """
        Perform unit propagation until no unit clause is left.

        Returns:
            Tuple of (simplified clauses, updated assignment) or (None, assignment) if conflict.
        """
        assignment = assignment.copy()
        clauses = [clause[:] for clause in clauses]

        while True:
            unit = next((clause[0] for clause in clauses if len(clause) == 1), None)
            if unit is None:
                break

            value = not unit.negated
            self.trace.record(TraceKind.UNIT, clauses, assignment,
                              variable=unit.variable, value=value)

            assignment[unit.variable] = value
            clauses = substitute(clauses, unit.variable, value)

            if has_empty_clause(clauses):
                self.trace.record(TraceKind.CONFLICT, clauses, assignment,
                                  reason="Conflict after unit propagation")
                return None, assignment

        return clauses, assignment

    def eliminate_pure(self, clauses: List[Clause],
                       assignment: Assignment) -> Tuple[List[Clause], Assignment]:
        """
        Eliminate pure literals (variables that appear with only one polarity).

        One variable is fixed per pass and the polarities are recomputed from
        the simplified clauses before the next one is picked.

        Returns:
            Tuple of (simplified clauses, updated assignment).
        """
        assignment = assignment.copy()
        clauses = [clause[:] for clause in clauses]

        while True:
            lit = find_pure_literal(clauses, assignment)
            if lit is None:
                break

            value = not lit.negated
            self.trace.record(TraceKind.PURE, clauses, assignment,
                              variable=lit.variable, value=value)

            assignment[lit.variable] = value
            clauses = substitute(clauses, lit.variable, value)

        return clauses, assignment


def solve_sat(clauses: Iterable[Iterable[Any]], **solver_options) -> Optional[Assignment]:
    """
    Convenience function to solve a SAT problem.

    Args:
        clauses: List of clauses of literal tokens
        solver_options: Passed on to DPLLSolver

    Returns:
        Satisfying assignment if SAT, None if UNSAT
    """
    return DPLLSolver(clauses, **solver_options).solve()


def solve_with_trace(clauses: Iterable[Iterable[Any]],
                     **solver_options) -> Tuple[Optional[Assignment], List[TraceEvent]]:
    """Solve and also return the events recorded during the search."""
    solver = DPLLSolver(clauses, **solver_options)
    result = solver.solve()
    return result, solver.get_trace()


if __name__ == "__main__":
    # Example usage
    print("Traced DPLL SAT Solver")
    print("=" * 50)

    # (a ∨ b) ∧ (¬a ∨ c)
    clauses1 = [['a', 'b'], ['!a', 'c']]

    print("\nExample 1: (a ∨ b) ∧ (¬a ∨ c)")
    result1, trace1 = solve_with_trace(clauses1)
    if result1 is not None:
        print(f"SAT - Solution: {result1}")
    else:
        print("UNSAT")
    print(f"{len(trace1)} steps: {[event.kind.value for event in trace1]}")

    # (a) ∧ (¬a)
    clauses2 = [['a'], ['!a']]

    print("\nExample 2: (a) ∧ (¬a)")
    result2 = solve_sat(clauses2)
    if result2 is not None:
        print(f"SAT - Solution: {result2}")
    else:
        print("UNSAT")

    # (a ∨ b ∨ ¬c) ∧ (¬a ∨ d) ∧ (c ∨ ¬d ∨ e)
    clauses3 = [['a', 'b', '!c'], ['!a', 'd'], ['c', '!d', 'e']]

    print("\nExample 3: (a ∨ b ∨ ¬c) ∧ (¬a ∨ d) ∧ (c ∨ ¬d ∨ e)")
    result3 = solve_sat(clauses3)
    if result3 is not None:
        print(f"SAT - Solution: {result3}")
    else:
        print("UNSAT")
