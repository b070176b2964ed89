#!/usr/bin/env python3
"""
Worked examples for the traced DPLL SAT solver
"""

from dpll_sat import DPLLSolver, TraceKind, solve_sat
from formula_io import formula_to_string, parse_dimacs, parse_formula, render_trace


def example_3_coloring():
    """
    Graph 3-coloring problem.

    Given a graph, can we color each vertex with one of 3 colors
    such that no two adjacent vertices have the same color?

    Graph: Triangle (3 vertices, all connected)
    This is satisfiable.
    """
    print("\n" + "="*60)
    print("Example: Graph 3-Coloring (Triangle)")
    print("="*60)

    vertices = ['v1', 'v2', 'v3']
    colors = ['red', 'green', 'blue']
    edges = [('v1', 'v2'), ('v1', 'v3'), ('v2', 'v3')]

    def var(vertex, color):
        return f"{vertex}_{color}"

    clauses = []

    # Each vertex must have at least one color
    for v in vertices:
        clauses.append([var(v, c) for c in colors])

    # Each vertex has at most one color
    for v in vertices:
        for i, c1 in enumerate(colors):
            for c2 in colors[i + 1:]:
                clauses.append([f"!{var(v, c1)}", f"!{var(v, c2)}"])

    # Adjacent vertices have different colors
    for a, b in edges:
        for c in colors:
            clauses.append([f"!{var(a, c)}", f"!{var(b, c)}"])

    result = solve_sat(clauses)

    if result is not None:
        print("SAT - 3-coloring exists!")
        print("\nColoring:")
        for v in vertices:
            for c in colors:
                if result[var(v, c)]:
                    print(f"  Vertex {v}: {c}")
    else:
        print("UNSAT - No 3-coloring exists")


def example_trace():
    """
    Show every step the solver takes on a small formula.
    """
    print("\n" + "="*60)
    print("Example: Solver Trace")
    print("="*60)

    clauses = parse_formula("(a | b | !c) & (!a | d) & (c | !d | e)")
    solver = DPLLSolver(clauses)
    result = solver.solve()

    print(f"\nFormula: {formula_to_string(clauses)}")
    for line in render_trace(solver.get_trace()):
        print(line)

    branches = solver.trace.count(TraceKind.BRANCH)
    print(f"\nResult: {result} ({branches} branch decisions)")


def example_dimacs_format():
    """
    Example using DIMACS format.
    """
    print("\n" + "="*60)
    print("Example: DIMACS Format")
    print("="*60)

    dimacs = """
    c Example CNF formula in DIMACS format
    c (x1 ∨ ¬x2) ∧ (x2 ∨ x3) ∧ (¬x1 ∨ ¬x3)
    p cnf 3 3
    1 -2 0
    2 3 0
    -1 -3 0
    """

    print("\nDIMACS input:")
    print(dimacs)

    formula = parse_dimacs(dimacs)
    result = DPLLSolver(formula).solve()

    if result is not None:
        print(f"SAT - Solution: {result}")
    else:
        print("UNSAT")


def example_pigeonhole():
    """
    Pigeonhole principle: n+1 pigeons in n holes.
    This is a classic UNSAT problem.
    """
    print("\n" + "="*60)
    print("Example: Pigeonhole Principle (4 pigeons, 3 holes)")
    print("="*60)

    n_pigeons = 4
    n_holes = 3

    clauses = []

    # Each pigeon must be in at least one hole
    for pigeon in range(n_pigeons):
        clauses.append([f"p{pigeon}h{hole}" for hole in range(n_holes)])

    # At most one pigeon per hole
    for hole in range(n_holes):
        for p1 in range(n_pigeons):
            for p2 in range(p1 + 1, n_pigeons):
                clauses.append([f"!p{p1}h{hole}", f"!p{p2}h{hole}"])

    print(f"\n{len(clauses)} clauses generated")

    solver = DPLLSolver(clauses)
    result = solver.solve()

    if result is not None:
        print("SAT - Assignment found (unexpected!)")
    else:
        print("UNSAT - Cannot fit 4 pigeons in 3 holes (as expected)")
    print(f"{solver.trace.count(TraceKind.BRANCH)} branch decisions, "
          f"{solver.trace.count(TraceKind.CONFLICT)} conflicts")


if __name__ == "__main__":
    print("\nTraced DPLL SAT Solver - Examples")
    print("="*60)

    example_trace()
    example_3_coloring()
    example_dimacs_format()
    example_pigeonhole()

    print("\n" + "="*60)
    print("All examples completed!")
    print("="*60)
