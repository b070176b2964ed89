"""
Reading and writing formulas and solver traces.

Input formats:
    JSON      [["a", "b", "!c"], ["!a", "d"]]
    infix     (a | b | !c) & (!a | d)
    DIMACS    p cnf 4 2 / 1 2 -3 0 / -1 4 0
"""

import json
import logging
import os
from typing import Any, Dict, Iterable, List, Optional, Sequence

from dpll_sat import (
    Assignment, CNFFormula, Literal, MalformedFormulaError,
    TraceEvent, TraceKind,
)

logger = logging.getLogger(__name__)

DIMACS_EXTENSIONS = ('.cnf', '.dimacs')


class FormulaParseError(MalformedFormulaError):
    """Raised when formula text cannot be parsed."""

    def __init__(self, message: str, text: str = ''):
        self.text = text
        super().__init__(message)


def _check_token(token: str, text: str) -> str:
    try:
        Literal.from_token(token)
    except MalformedFormulaError:
        raise FormulaParseError(f"Malformed literal {token!r}", text) from None
    return token


def parse_formula(text: str) -> List[List[str]]:
    """
    Parse a CNF formula given as JSON or as infix text.

    Args:
        text: Either a JSON list of lists of literal strings, or clauses in
              parentheses joined by '&' with literals joined by '|'.

    Returns:
        List of clauses, each a list of literal tokens.

    Raises:
        FormulaParseError: on empty input, malformed JSON shape, or empty
                           literal tokens.
    """
    text = text.strip()
    if not text:
        raise FormulaParseError("Empty formula text", text)

    if text.startswith('['):
        try:
            formula = json.loads(text)
        except json.JSONDecodeError as e:
            raise FormulaParseError(f"Invalid JSON formula: {e}", text) from e
        if not isinstance(formula, list) or not all(
                isinstance(clause, list) and all(isinstance(lit, str) for lit in clause)
                for clause in formula):
            raise FormulaParseError("JSON formula must be a list of lists of strings", text)
        return [[_check_token(lit, text) for lit in clause] for clause in formula]

    formula = []
    for part in text.split('&'):
        clause_text = part.replace('(', '').replace(')', '').strip()
        formula.append([_check_token(lit.strip(), text) for lit in clause_text.split('|')])
    return formula


def parse_dimacs(text: str) -> CNFFormula:
    """
    Parse a CNF formula in DIMACS format.

    Args:
        text: DIMACS format text

    Returns:
        CNFFormula object with integer variables
    """
    clauses = []
    current: List[int] = []
    declared = None

    for line in text.strip().split('\n'):
        line = line.strip()

        # Skip comments and blank lines
        if not line or line.startswith('c') or line.startswith('%'):
            continue

        if line.startswith('p'):
            parts = line.split()
            if len(parts) != 4 or parts[1] != 'cnf':
                raise FormulaParseError(f"Bad DIMACS header: {line!r}", text)
            try:
                declared = (int(parts[2]), int(parts[3]))
            except ValueError:
                raise FormulaParseError(f"Bad DIMACS header: {line!r}", text) from None
            continue

        # Clauses end at 0 and may span lines
        for tok in line.split():
            try:
                lit = int(tok)
            except ValueError:
                raise FormulaParseError(f"Bad DIMACS literal {tok!r}", text) from None
            if lit == 0:
                if current:
                    clauses.append(current)
                    current = []
            else:
                current.append(lit)

    if current:
        clauses.append(current)

    if declared is not None and declared[1] != len(clauses):
        logger.warning("DIMACS header declares %d clauses, found %d", declared[1], len(clauses))

    return CNFFormula(clauses)


def load_formula(path: str) -> CNFFormula:
    """Read a formula file, choosing DIMACS or JSON/infix by extension."""
    with open(path, encoding='utf-8') as f:
        text = f.read()
    if os.path.splitext(path)[1].lower() in DIMACS_EXTENSIONS:
        return parse_dimacs(text)
    return CNFFormula(parse_formula(text))


def formula_to_string(clauses: Iterable[Iterable[Any]]) -> str:
    """Render clauses as (a | b) & (!a | c)."""
    return ' & '.join(
        '(' + ' | '.join(str(Literal.from_token(lit)) for lit in clause) + ')'
        for clause in clauses)


def assignment_to_string(assignment: Assignment) -> str:
    return '{' + ', '.join(f"{var}: {'true' if value else 'false'}"
                           for var, value in assignment.items()) + '}'


def describe_event(event: TraceEvent) -> str:
    """One-line description of a trace event."""
    if event.kind == TraceKind.CHECK:
        return "Check formula"
    if event.kind in (TraceKind.UNIT, TraceKind.PURE, TraceKind.BRANCH):
        label = {
            TraceKind.UNIT: "Unit literal",
            TraceKind.PURE: "Pure literal",
            TraceKind.BRANCH: "Branch",
        }[event.kind]
        return f"{label}: {event.variable} = {'true' if event.value else 'false'}"
    if event.kind == TraceKind.BACKTRACK:
        return f"Backtrack ({event.reason or 'unsatisfiable branch'})"
    return f"Conflict: {event.reason or 'contradiction'}"


def render_trace(events: Sequence[TraceEvent]) -> List[str]:
    """
    Render trace events as numbered text lines.

    Each step gets a description line, then the formula snapshot, then the
    assignment snapshot when it is not empty.
    """
    lines = []
    for index, event in enumerate(events, start=1):
        lines.append(f"Step {index}: {describe_event(event)}")
        lines.append(f"  Formula: {formula_to_string(event.formula)}")
        if event.assignment:
            lines.append(f"  Assignment: {assignment_to_string(event.assignment)}")
    return lines


def trace_to_dicts(events: Sequence[TraceEvent]) -> List[Dict[str, Any]]:
    return [event.to_dict() for event in events]


def trace_to_json(events: Sequence[TraceEvent], indent: Optional[int] = None) -> str:
    return json.dumps(trace_to_dicts(events), indent=indent)


def formula_to_json(clauses: Iterable[Iterable[Any]]) -> str:
    """Serialize clauses as a JSON list of token lists, '!' marking negation."""
    return json.dumps([[str(Literal.from_token(lit)) for lit in clause] for clause in clauses])
