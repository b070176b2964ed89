#!/usr/bin/env python3
"""
Command line front end for the DPLL solver.

    python solve_cli.py solve formula.json --trace
    python solve_cli.py --cfg solve.json solve a.cnf b.cnf
    python solve_cli.py generate --out_dir ./instances --samples 20 --vars 12 --clauses 40
"""
import argparse
import json
import logging
import os
import sys
import time
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm, trange

from cnf_generator import generate_planted_formula, generate_random_ksat, write_formula_file
from dpll_sat import CNFFormula, DPLLSolver, FormulaTooLargeError, MalformedFormulaError
from formula_io import (
    assignment_to_string, formula_to_string, load_formula, render_trace, trace_to_dicts,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

EXIT_OK = 0
EXIT_SOLVER_ERROR = 1
EXIT_INPUT_ERROR = 2


def load_config(path: str) -> Dict[str, Any]:
    """Read a JSON object whose keys are used as argument defaults."""
    with open(path, encoding='utf-8') as f:
        cfg = json.load(f)
    if not isinstance(cfg, dict):
        raise ValueError(f"Config {path} must contain a JSON object")
    return cfg


def build_parser():
    parser = argparse.ArgumentParser(
        prog='dpll-solve', description="Decide CNF satisfiability with DPLL")
    parser.add_argument("--cfg", type=str, default=None,
                        help='JSON file with default values for the subcommand options')
    parser.add_argument("--verbose", "-v", action='store_true', default=False)

    subparsers = parser.add_subparsers(dest='command')
    subparsers.required = True

    # ----------------------------------------------------------------------
    solve_parser = subparsers.add_parser('solve', help='Solve formula files')
    solve_parser.add_argument("files", nargs='+',
                              help='.cnf/.dimacs files are read as DIMACS, anything else as JSON or infix text')
    solve_parser.add_argument("--trace", action='store_true', default=False,
                              help='Print every solver step')
    solve_parser.add_argument("--json", action='store_true', default=False,
                              help='One JSON object per file instead of text')
    solve_parser.add_argument("--no_complete", action='store_true', default=False,
                              help='Leave variables the search did not need unassigned')
    solve_parser.add_argument("--max_variables", type=int, default=None)

    # ----------------------------------------------------------------------
    gen_parser = subparsers.add_parser('generate', help='Write random formula files')
    gen_parser.add_argument("--out_dir", type=str, required=True)
    gen_parser.add_argument("--samples", type=int, default=10)
    gen_parser.add_argument("--vars", type=int, default=10)
    gen_parser.add_argument("--clauses", type=int, default=40)
    gen_parser.add_argument("--clause_size", type=int, default=3)
    gen_parser.add_argument("--seed", type=int, default=None)
    gen_parser.add_argument("--uniform", action='store_true', default=False,
                            help='Uniform random k-SAT instead of planted satisfiable instances')
    gen_parser.add_argument("--prefix", type=str, default='formula')

    return parser, (solve_parser, gen_parser)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser, subparsers = build_parser()
    pre_args, _ = parser.parse_known_args(argv)
    if pre_args.cfg:
        try:
            cfg = load_config(pre_args.cfg)
        except (OSError, ValueError) as e:
            parser.error(f"cannot load config {pre_args.cfg}: {e}")
        # command line flags still take precedence over the config file
        for sub in subparsers:
            sub.set_defaults(**cfg)
    return parser.parse_args(argv)


def solve_formula(formula: CNFFormula, args: argparse.Namespace) -> Dict[str, Any]:
    solver = DPLLSolver(formula, complete_assignment=not args.no_complete,
                        max_variables=args.max_variables, record_trace=args.trace)
    start_time = time.time()
    result = solver.solve()
    elapsed = time.time() - start_time
    return {
        'satisfiable': result is not None,
        'assignment': result,
        'verified': result is not None and formula.is_satisfied(result),
        'time': elapsed,
        'trace': solver.get_trace(),
    }


def _report_text(path: str, formula: CNFFormula, report: Dict[str, Any]) -> List[str]:
    lines = [f"File: {path}", f"Formula: {formula_to_string(formula.original_clauses)}"]
    if report['satisfiable']:
        lines.append("Result: SAT")
        lines.append("Verification: " + ("OK" if report['verified'] else "FAILED"))
        for var in sorted(report['assignment'], key=str):
            lines.append(f"  {var} = {'true' if report['assignment'][var] else 'false'}")
    else:
        lines.append("Result: UNSAT")
    lines.append(f"Time: {report['time']:.6f}s")
    if report['trace']:
        lines.extend(render_trace(report['trace']))
    return lines


def _report_json(path: str, report: Dict[str, Any]) -> str:
    data = {
        'file': path,
        'satisfiable': report['satisfiable'],
        'assignment': report['assignment'],
        'time': report['time'],
    }
    if report['trace']:
        data['trace'] = trace_to_dicts(report['trace'])
    return json.dumps(data)


def run_solve(args: argparse.Namespace) -> int:
    status = EXIT_OK
    paths = args.files
    iterator = tqdm(paths, desc="Solving", dynamic_ncols=True) if len(paths) > 1 else paths

    for path in iterator:
        try:
            formula = load_formula(path)
        except (OSError, MalformedFormulaError) as e:
            logger.error("Cannot read %s: %s", path, e)
            status = max(status, EXIT_INPUT_ERROR)
            continue

        try:
            report = solve_formula(formula, args)
        except FormulaTooLargeError as e:
            logger.error("Skipping %s: %s", path, e)
            status = max(status, EXIT_SOLVER_ERROR)
            continue

        logger.info("%s: %s in %.6fs", path, "SAT" if report['satisfiable'] else "UNSAT", report['time'])
        if args.json:
            tqdm.write(_report_json(path, report))
        else:
            for line in _report_text(path, formula, report):
                tqdm.write(line)

    return status


def run_generate(args: argparse.Namespace) -> int:
    os.makedirs(args.out_dir, exist_ok=True)
    rng = np.random.default_rng(args.seed)

    for i in trange(args.samples, desc="Generating", dynamic_ncols=True):
        if args.uniform:
            clauses = generate_random_ksat(args.vars, args.clauses, args.clause_size, seed=rng)
        else:
            clauses, _ = generate_planted_formula(args.vars, args.clauses, args.clause_size, seed=rng)
        write_formula_file(os.path.join(args.out_dir, f"{args.prefix}_{i:05d}.json"), clauses)

    logger.info("Wrote %d formulas to %s", args.samples, args.out_dir)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format=LOG_FORMAT)

    if args.command == 'solve':
        return run_solve(args)
    return run_generate(args)


if __name__ == "__main__":
    sys.exit(main())
