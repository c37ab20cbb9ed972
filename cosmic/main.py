"""Command-line entry points for the cosmology calculator."""
from __future__ import annotations

import argparse
import copy
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import yaml

from cosmic import __version__
from cosmic.data_loaders.redshift_loader import RedshiftBatch, read_parameterised_redshifts
from cosmic.models.cosmology import (
    Cosmology,
    CosmologyParameterError,
    CosmologyParameters,
    compute_state,
)
from cosmic.reporting.formatters import (
    SEPARATORS,
    distance_table,
    format_html,
    format_long,
    write_results_table,
)
from cosmic.utils.constants import DEFAULT_H0, DEFAULT_OMEGA_LAMBDA, DEFAULT_OMEGA_M
from cosmic.utils.logging_config import StructuredLogger, build_run_metadata, compute_sha256
from cosmic.utils.prompts import get_cosmology_from_user
from cosmic.utils.validation import ConfigValidationError, is_numeric, parse_numeric, require_existing_file

DEFAULT_CONFIG = {
    'cosmology': {
        'H0': DEFAULT_H0,
        'Omega_m': DEFAULT_OMEGA_M,
        'Omega_lambda': DEFAULT_OMEGA_LAMBDA,
    },
    'run': {
        'prompt': True,
        'quiet': False,
        'html': False,
        'outfile': 'cosmic.out',
        'separator': 'tab',
        'log_dir': None,
        'run_id': None,
    },
}

# key=value spellings of the classic command line
_LEGACY_VALUED = {
    'h': '--H0',
    'm': '--omega-m',
    'l': '--omega-lambda',
    'z': '--redshift',
    'batch': '--batch',
    'outfile': '--outfile',
}
_LEGACY_NUMERIC = {'h', 'm', 'l', 'z'}
_LEGACY_SWITCHES = {
    'quiet': ('--quiet', '--no-quiet'),
    'prompt': ('--prompt', '--no-prompt'),
    'html': ('--html', '--no-html'),
    'help': ('--help', None),
    'version': ('--version', None),
}

INTERACTIVE_PROMPT = "redshift (ctrl-D to quit): "


def _banner() -> str:
    return (
        f"cosmic version {__version__}\n"
        "cosmic comes with ABSOLUTELY NO WARRANTY; see the accompanying license.\n"
        "Invoke with --quiet (or quiet=yes) to suppress this message.\n"
    )


def _strip_quotes(value: str) -> str:
    if value[:1] in ('"', "'"):
        value = value[1:]
    if value[-1:] in ('"', "'"):
        value = value[:-1]
    return value


def _translate_legacy_args(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Rewrite ``key=value`` and ``-flag``/``-noflag`` tokens as argparse options.

    Returns the translated argument list and a list of problems found; tokens
    that are not legacy spellings are passed through untouched.
    """
    translated: List[str] = []
    problems: List[str] = []
    for token in argv:
        if not token.startswith('-') and '=' in token:
            key, _, value = token.partition('=')
            value = _strip_quotes(value.strip())
            if key not in _LEGACY_VALUED and key not in _LEGACY_SWITCHES:
                problems.append(f"unknown argument: {token}")
            elif not value:
                problems.append(f"incomplete argument: {token}")
            elif key in _LEGACY_VALUED:
                if key in _LEGACY_NUMERIC and not is_numeric(value):
                    problems.append(f"invalid value for argument '{key}'")
                else:
                    translated.append(f"{_LEGACY_VALUED[key]}={value}")
            else:
                on_flag, off_flag = _LEGACY_SWITCHES[key]
                if value[0] in 'yY':
                    translated.append(on_flag)
                elif value[0] in 'nN':
                    if off_flag is not None:
                        translated.append(off_flag)
                else:
                    problems.append(f"invalid value for argument '{key}'")
            continue

        if token.startswith('-') and not token.startswith('--') and token[1:].isalpha():
            name = token[1:]
            negated = name.startswith('no') and name[2:] in _LEGACY_SWITCHES
            if negated:
                off_flag = _LEGACY_SWITCHES[name[2:]][1]
                if off_flag is not None:
                    translated.append(off_flag)
                continue
            if name in _LEGACY_SWITCHES:
                translated.append(_LEGACY_SWITCHES[name][0])
                continue

        translated.append(token)
    return translated, problems


def _numeric_argument(text: str) -> float:
    try:
        return parse_numeric(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _redshift_argument(text: str) -> float:
    value = _numeric_argument(text)
    if value < 0:
        raise argparse.ArgumentTypeError("the redshift must be a number >= 0")
    return value


def _safe_load_yaml(path):
    with open(path, 'r', encoding='utf-8') as handle:
        loaded = yaml.safe_load(handle)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigValidationError(
            f"YAML file {path} must contain a mapping at the top level"
        )
    return loaded


def _load_configuration(config_path):
    """Return the built-in defaults overlaid with ``config_path`` (if given)."""
    config_data = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is None:
        config_data['config_path'] = None
        return config_data

    resolved = require_existing_file(config_path, description='configuration file')
    loaded = _safe_load_yaml(resolved)
    for section, values in loaded.items():
        if section not in DEFAULT_CONFIG:
            raise ConfigValidationError(f"Unknown section '{section}' in {resolved}")
        if values is None:
            continue
        if not isinstance(values, dict):
            raise ConfigValidationError(f"Section '{section}' in {resolved} must be a mapping")
        unknown = sorted(set(values) - set(DEFAULT_CONFIG[section]))
        if unknown:
            raise ConfigValidationError(
                f"Unknown keys in section '{section}' of {resolved}: {', '.join(unknown)}"
            )
        config_data[section].update(values)

    for key, value in config_data['cosmology'].items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigValidationError(f"cosmology.{key} in {resolved} must be a number")
    if config_data['run']['separator'] not in SEPARATORS:
        raise ConfigValidationError(
            f"run.separator in {resolved} must be one of {', '.join(sorted(SEPARATORS))}"
        )
    config_data['config_path'] = resolved
    return config_data


def _build_parsers():
    base_parser = argparse.ArgumentParser(add_help=False)
    base_parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to a YAML configuration file'
    )

    parser = argparse.ArgumentParser(
        prog='cosmic',
        description='Cosmological distances, times and volumes for a FLRW universe',
        parents=[base_parser]
    )
    parser.add_argument('--H0', type=_numeric_argument,
                        help='Hubble constant in km/s/Mpc (h=value)')
    parser.add_argument('--omega-m', dest='omega_m', type=_numeric_argument,
                        help='Matter density parameter (m=value)')
    parser.add_argument('--omega-lambda', dest='omega_lambda', type=_numeric_argument,
                        help='Dark-energy density parameter (l=value)')
    parser.add_argument('-z', '--redshift', type=_redshift_argument, default=None,
                        help='Single redshift for quick mode (z=value)')
    parser.add_argument('--batch', type=str,
                        help='Run in batch mode using the redshifts in this file (batch=file)')
    parser.add_argument('--outfile', type=str,
                        help='Batch mode output file (outfile=file)')
    parser.add_argument('--separator', choices=sorted(SEPARATORS),
                        help='Column separator for batch output')
    parser.add_argument('--html', action=argparse.BooleanOptionalAction,
                        help='Format reports as HTML (html=yes)')
    parser.add_argument('--quiet', action=argparse.BooleanOptionalAction,
                        help='Suppress the banner and progress messages (quiet=yes)')
    parser.add_argument('--prompt', action=argparse.BooleanOptionalAction,
                        help='Prompt for the cosmological parameters (prompt=no to skip)')
    parser.add_argument('--log-dir', dest='log_dir', type=str,
                        help='Directory for per-run JSONL event logs and metadata')
    parser.add_argument('--version', action='version', version=f'cosmic version {__version__}')
    return base_parser, parser


def _run_single(cosmology: Cosmology, z: float, html: bool) -> int:
    cosmology.set_redshift(z)
    report = format_html(cosmology.state) if html else format_long(cosmology.state)
    sys.stdout.write(report)
    return 0


def _run_interactive(cosmology: Cosmology, html: bool, run_logger: StructuredLogger) -> int:
    evaluated = 0
    while True:
        try:
            reply = input(INTERACTIVE_PROMPT)
        except EOFError:
            sys.stdout.write("\n")
            break
        # several redshifts may share a line
        for token in reply.split():
            try:
                z = parse_numeric(token, 'redshift')
            except ValueError:
                print("Redshift must be numeric", file=sys.stderr)
                continue
            if z < 0:
                print("  The redshift must be a number >= 0.", file=sys.stderr)
                continue
            cosmology.set_redshift(z)
            evaluated += 1
            report = format_html(cosmology.state) if html else format_long(cosmology.state)
            sys.stdout.write("\n" + report + "\n")
    run_logger.log_event('interactive.complete', {'evaluated': evaluated})
    return 0


def _run_batch(cosmology: Cosmology, args, run_logger: StructuredLogger,
               checksums: Dict[str, Optional[str]]) -> Tuple[int, Optional[Path]]:
    try:
        batch = RedshiftBatch(args.batch)
    except ConfigValidationError as exc:
        run_logger.log_event(
            'batch.load_failed',
            {'file': args.batch, 'error': str(exc)},
            level=logging.ERROR,
            message=f"Error reading batch file: {exc}\nExiting with no further output",
        )
        return 1, None

    checksums['batch'] = compute_sha256(Path(batch.source_file))
    run_logger.log_event(
        'batch.start',
        {**batch.summary(), 'outfile': args.outfile, 'separator': args.separator},
        message=f"Running in batch mode. Output will be in {args.outfile}",
    )

    states = []
    for z in batch:
        cosmology.set_redshift(z)
        states.append(cosmology.state)

    outfile = Path(args.outfile)
    try:
        with outfile.open('w', encoding='utf-8') as handle:
            table = write_results_table(cosmology.parameters, states, handle, args.separator)
    except OSError as exc:
        run_logger.log_event(
            'batch.write_failed',
            {'outfile': str(outfile), 'error': str(exc)},
            level=logging.ERROR,
            message=f"Error opening output file: {outfile} ({exc})",
        )
        return 1, None

    artifact = run_logger.save_dataframe('batch_results.csv', table)
    run_logger.log_event(
        'batch.complete',
        {'rows': len(table), 'outfile': str(outfile), 'artifact': artifact},
        message=f"Wrote {len(table)} redshifts to {outfile}",
    )
    return 0, outfile


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the calculator and return the process exit status."""
    argv = list(sys.argv[1:] if argv is None else argv)
    translated, problems = _translate_legacy_args(argv)
    if problems:
        for problem in problems:
            print(problem, file=sys.stderr)
        return 2

    base_parser, parser = _build_parsers()
    preliminary_args, remaining = base_parser.parse_known_args(translated)

    try:
        config_data = _load_configuration(preliminary_args.config)
    except ConfigValidationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    cosmology_defaults = config_data['cosmology']
    run_defaults = config_data['run']
    parser.set_defaults(
        H0=cosmology_defaults['H0'],
        omega_m=cosmology_defaults['Omega_m'],
        omega_lambda=cosmology_defaults['Omega_lambda'],
        prompt=run_defaults['prompt'],
        quiet=run_defaults['quiet'],
        html=run_defaults['html'],
        outfile=run_defaults['outfile'],
        separator=run_defaults['separator'],
        log_dir=run_defaults['log_dir'],
    )
    parser.set_defaults(config=preliminary_args.config)
    args = parser.parse_args(remaining)

    if not args.quiet:
        sys.stdout.write(_banner() + "\n")

    run_logger = StructuredLogger(
        run_id=run_defaults.get('run_id'),
        base_dir=args.log_dir,
        console_level=logging.WARNING if args.quiet else logging.INFO,
    )

    try:
        parameters = CosmologyParameters(args.H0, args.omega_m, args.omega_lambda)
    except CosmologyParameterError as exc:
        run_logger.log_event('parameters.invalid', {'error': str(exc)}, level=logging.ERROR,
                             message=str(exc))
        return 2
    if args.prompt:
        parameters = get_cosmology_from_user(parameters)
    cosmology = Cosmology.from_parameters(parameters)

    if args.redshift is not None:
        mode = 'single'
    elif args.batch:
        mode = 'batch'
    else:
        mode = 'interactive'
    run_logger.log_event(
        'run_start',
        {'mode': mode, 'parameters': parameters, 'config_path': config_data.get('config_path')},
    )

    checksums: Dict[str, Optional[str]] = {}
    if config_data.get('config_path'):
        checksums['config'] = compute_sha256(Path(config_data['config_path']))

    results_path = None
    if mode == 'single':
        status = _run_single(cosmology, args.redshift, args.html)
    elif mode == 'batch':
        status, results_path = _run_batch(cosmology, args, run_logger, checksums)
    else:
        status = _run_interactive(cosmology, args.html, run_logger)

    if run_logger.persistent:
        metadata = build_run_metadata(
            run_logger,
            arguments=vars(args),
            config_snapshot=config_data,
            parameters=parameters.as_dict(),
            results_path=results_path,
            checksums=checksums,
            extra={'mode': mode, 'status': status},
        )
        run_logger.save_json('run_metadata.json', metadata)
    run_logger.log_event('run_complete', {'mode': mode, 'status': status})
    return status


def redshift_distance_main(argv: Optional[Sequence[str]] = None) -> int:
    """Tabulate d_A, d_L, d_C and d_M for a parameterised redshift file as CSV."""
    parser = argparse.ArgumentParser(
        prog='redshift-distance',
        description='Write the four distance measures for every redshift in a parameter file',
    )
    parser.add_argument('input', nargs='?', default='redshifts.txt',
                        help="File holding 'H0 Omega_m Omega_lambda', the redshift count and the redshifts")
    parser.add_argument('-o', '--output', default='results.csv', help='CSV file to write')
    parser.add_argument('--quiet', action='store_true', help='Only report errors')
    args = parser.parse_args(argv)

    run_logger = StructuredLogger(console_level=logging.WARNING if args.quiet else logging.INFO)
    try:
        source = read_parameterised_redshifts(args.input)
    except ConfigValidationError as exc:
        run_logger.log_event('distance_table.load_failed', {'error': str(exc)},
                             level=logging.ERROR, message=f"Error reading {args.input}: {exc}")
        return 1

    run_logger.log_event(
        'distance_table.start',
        {'file': source.source_file, 'count': int(source.z.size)},
        message=f"{source.z.size} redshifts",
    )
    states = []
    for z in source.z:
        states.append(compute_state(source.parameters, z))
        run_logger.log_event('distance_table.redshift', {'z': float(z)}, level=logging.DEBUG,
                             message=f"{z:g}")

    table = distance_table(states)
    try:
        table.to_csv(args.output, index=False)
    except OSError as exc:
        run_logger.log_event('distance_table.write_failed', {'error': str(exc)},
                             level=logging.ERROR, message=f"Error writing {args.output}: {exc}")
        return 1
    run_logger.log_event('distance_table.complete', {'rows': len(table), 'output': args.output},
                         message=f"Distances written to {args.output}")
    return 0


def _guarded(entry_point) -> None:
    try:
        status = entry_point()
    except ConfigValidationError as exc:
        print(f"\nConfiguration error: {exc}", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:  # pylint: disable=broad-except
        print(f"\nFATAL ERROR: {exc}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        sys.exit(1)
    sys.exit(status)


def cli():
    _guarded(main)


def redshift_distance_cli():
    _guarded(redshift_distance_main)


if __name__ == '__main__':
    cli()
