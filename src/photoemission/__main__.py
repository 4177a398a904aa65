"""
Photoemission — Command-line Entry Point
=========================================

Run a simulation and write its results with:

    python -m photoemission [options]

Steps, in fixed order: simulate -> process -> write per-bin CSV ->
print report (-> summary figure with --figures).

Examples:
    python -m photoemission --tau 100e-15 --num-space-bins 200 --num-time-slices 200
    python -m photoemission --simple --output-dir ./results --figures
"""

import argparse
import os
import sys
import time

from .apparatus import ApparatusParameters
from .config import (
    DEFAULT_DC_FIELD,
    DEFAULT_EPSABS,
    DEFAULT_EPSREL,
    DEFAULT_NUM_ELECTRONS,
    DEFAULT_NUM_SPACE_BINS,
    DEFAULT_NUM_TAUS,
    DEFAULT_NUM_TIME_SLICES,
    DEFAULT_OUTPUT_FILENAME,
    DEFAULT_PHOTON_ENERGY,
    DEFAULT_TAU,
    DEFAULT_WORK_FUNCTION,
    OUTPUT_DIR_ENV,
    SimulationConfig,
)
from .errors import PhotoemissionError
from .simulation import PhotoemissionSimulation


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m photoemission',
        description='Longitudinal photoemission pulse simulation -> AG model parameters',
    )
    apparatus = parser.add_argument_group('apparatus')
    apparatus.add_argument('--tau', type=float, default=DEFAULT_TAU,
                           help='HW1/eM laser duration [s] (default: %(default)g)')
    apparatus.add_argument('--num-electrons', type=float, default=DEFAULT_NUM_ELECTRONS,
                           help='Electrons in the pulse (default: %(default)g)')
    apparatus.add_argument('--work-function', type=float, default=DEFAULT_WORK_FUNCTION,
                           help='Photocathode work function [eV] (default: %(default)g)')
    apparatus.add_argument('--photon-energy', type=float, default=DEFAULT_PHOTON_ENERGY,
                           help='Laser photon energy [eV] (default: %(default)g)')
    apparatus.add_argument('--dc-field', type=float, default=DEFAULT_DC_FIELD,
                           help='Accelerating field [V/m] (default: %(default)g)')

    numerics = parser.add_argument_group('numerics')
    numerics.add_argument('--num-space-bins', type=int, default=DEFAULT_NUM_SPACE_BINS,
                          help='Spatial bins (default: %(default)d)')
    numerics.add_argument('--num-time-slices', type=int, default=DEFAULT_NUM_TIME_SLICES,
                          help='Emission time slices (default: %(default)d)')
    numerics.add_argument('--num-taus', type=float, default=DEFAULT_NUM_TAUS,
                          help='Simulated duration in units of tau (default: %(default)g)')
    numerics.add_argument('--simple', action='store_true',
                          help='Use the closed-form (v/vmax)^5 velocity distribution')
    numerics.add_argument('--epsabs', type=float, default=DEFAULT_EPSABS,
                          help='Quadrature absolute tolerance (default: %(default)g)')
    numerics.add_argument('--epsrel', type=float, default=DEFAULT_EPSREL,
                          help='Quadrature relative tolerance (default: %(default)g)')

    output = parser.add_argument_group('output')
    output.add_argument('--output', default=DEFAULT_OUTPUT_FILENAME,
                        help='Per-bin CSV file name (default: %(default)s)')
    output.add_argument('--output-dir', default=None,
                        help=f'Output directory (default: ${OUTPUT_DIR_ENV} or cwd)')
    output.add_argument('--figures', action='store_true',
                        help='Also save the summary figure')
    output.add_argument('--quiet', action='store_true',
                        help='Suppress progress output')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    # Use non-interactive backend
    import matplotlib
    matplotlib.use('Agg')

    if args.output_dir is not None:
        output_dir = os.path.abspath(args.output_dir)
        # modules that write files honour the environment override
        os.environ[OUTPUT_DIR_ENV] = output_dir
    else:
        output_dir = os.environ.get(OUTPUT_DIR_ENV, os.getcwd())
    os.makedirs(output_dir, exist_ok=True)

    try:
        apparatus = ApparatusParameters(
            tau=args.tau,
            num_electrons=args.num_electrons,
            work_function=args.work_function,
            photon_energy=args.photon_energy,
            dc_field=args.dc_field,
        )
        config = SimulationConfig(
            num_space_bins=args.num_space_bins,
            num_time_slices=args.num_time_slices,
            num_taus=args.num_taus,
            simple=args.simple,
            epsrel=args.epsrel,
            epsabs=args.epsabs,
            verbose=not args.quiet,
        )
        sim = PhotoemissionSimulation(apparatus, config)
    except PhotoemissionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if not args.quiet:
        print('=' * 70)
        print('  Photoemission — longitudinal pulse simulation')
        print('=' * 70)
        print(f'  Grid             : {config.num_time_slices} slices x '
              f'{config.num_space_bins} bins')
        print(f'  Output directory : {output_dir}')
        print('=' * 70)
        print()

    t_start = time.time()
    try:
        sim.simulate()
        sim.process()
    except PhotoemissionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    csv_path = sim.write_csv(os.path.join(output_dir, args.output))
    print(sim.report())
    print(f"Emission time offset: {sim.emission_time:e} s")

    if args.figures:
        from .figures import make_simulation_figures
        make_simulation_figures(sim, output_dir)

    if not args.quiet:
        print('=' * 70)
        print(f'  Per-bin records saved to {csv_path}')
        print(f'  Total time: {time.time() - t_start:.1f} s')
        print('=' * 70)
    return 0


if __name__ == '__main__':
    sys.exit(main())
