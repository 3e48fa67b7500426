"""
Command-line interface for crispr-predict.
"""

import json
import sys
from dataclasses import replace
from pathlib import Path

import click

from . import __version__
from .utils.sequence import SequenceValidationError, validate_sequence


def _setup_logging():
    import logging

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def _load_config(config_path, **overrides):
    """Load EngineConfig from YAML (or defaults) and apply non-None CLI overrides."""
    from .config import EngineConfig

    config = EngineConfig.from_yaml(Path(config_path)) if config_path else EngineConfig()
    changes = {k: v for k, v in overrides.items() if v is not None}
    return replace(config, **changes) if changes else config


@click.group()
@click.version_option(version=__version__)
def cli():
    """crispr-predict: guide/target compatibility and prediction outcome analysis."""
    pass


@cli.command()
@click.argument('sequences', nargs=-1, required=True)
def validate(sequences):
    """
    Validate one or more 23-nt guide or target sequences.

    \b
    Example:
      crispr-predict validate ATCGATCGATCGATCGATCAGGG atcgatcgatcgatcgatctgga
    """
    n_invalid = 0
    for seq in sequences:
        try:
            normalized = validate_sequence(seq)
            click.echo(f"{normalized}\tOK")
        except SequenceValidationError as e:
            n_invalid += 1
            click.echo(f"{seq}\t{type(e).__name__}: {e}")

    if n_invalid:
        sys.exit(1)


@cli.command()
@click.option('--guide', '-g', type=str, required=True,
              help='Guide (sgRNA) sequence, 23 nt')
@click.option('--target', '-t', type=str, required=True,
              help='Target DNA sequence, 23 nt')
@click.option('--label', '-l', type=click.IntRange(0, 1), required=True,
              help="Model's predicted label (0 or 1)")
@click.option('--confidence', '-c', type=float, required=True,
              help="Model's confidence (unit set by --confidence-unit)")
@click.option('--actual-label', '-a', type=click.IntRange(0, 1), default=1,
              help='Ground truth label (default: 1)')
@click.option('--confidence-unit', type=click.Choice(['fraction', 'percent']), default=None,
              help='Unit of --confidence (default: from config, else fraction)')
@click.option('--source', type=click.Choice(['PAM_rule', 'AI_model']), default=None,
              help='Label used for categorization (default: from config, else PAM_rule)')
@click.option('--config', 'config_path', type=click.Path(exists=True),
              help='YAML configuration file')
@click.option('--no-matrix', is_flag=True, default=False,
              help='Omit the 23x23 match matrix from the output')
def analyze(guide, target, label, confidence, actual_label, confidence_unit,
            source, config_path, no_matrix):
    """
    Classify one guide/target pair using a model's output.

    The model is not run here; pass its label and confidence.

    \b
    Example:
      crispr-predict analyze -g ATCGATCGATCGATCGATCAGGG -t ATCGATCGATCGATCGATCAGGG \\
                             -l 1 -c 0.87 -a 1
    """
    from .pipeline import build_record

    _setup_logging()

    try:
        config = _load_config(
            config_path,
            confidence_unit=confidence_unit,
            prediction_source=source,
        )

        result = build_record(
            guide=guide,
            target=target,
            actual_label=actual_label,
            model_label=label,
            model_confidence=confidence,
            config=config,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    display = result.to_display_dict()
    if no_matrix:
        display.pop('matrix')

    click.echo(json.dumps(display, indent=2))


@cli.command()
@click.argument('records', type=click.Path(exists=True))
@click.option('--range', '-r', 'time_range',
              type=click.Choice(['24h', '7d', '30d', '90d', 'all']), default=None,
              help='Time window ending now (default: from config, else 7d)')
@click.option('--period', '-p', type=click.Choice(['D', 'W', 'M']), default=None,
              help='Trend bucket: day, week or month (default: from config, else D)')
@click.option('--dense/--sparse', default=None,
              help='Zero-fill trend periods without records')
@click.option('--confidence-unit', type=click.Choice(['fraction', 'percent']), default=None,
              help='Unit of stored confidence values (default: from config, else fraction)')
@click.option('--config', 'config_path', type=click.Path(exists=True),
              help='YAML configuration file')
@click.option('--output', '-o', type=click.Path(),
              help='Write summary JSON to this path instead of stdout')
@click.option('--report', type=click.Path(),
              help='Also write a markdown report to this path')
def summarize(records, time_range, period, dense, confidence_unit, config_path, output, report):
    """
    Summarize stored prediction records.

    RECORDS is a .json, .jsonl, .tsv or .csv file of prediction records.

    \b
    Example:
      crispr-predict summarize predictions.json --range 30d --period D -o summary.json
    """
    from .analysis import summarize as summarize_records
    from .io.records import generate_summary_report, load_records, write_summary_json

    _setup_logging()

    try:
        config = _load_config(
            config_path,
            time_range=time_range,
            trend_period=period,
            dense_trends=dense,
            confidence_unit=confidence_unit,
        )

        loaded = load_records(Path(records), confidence_unit=config.confidence_unit)
        summary = summarize_records(
            loaded,
            window=config.window(),
            period=config.trend_period,
            dense=config.dense_trends,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output:
        write_summary_json(summary, Path(output))
        click.echo(f"Summary written to: {output}")
    else:
        click.echo(json.dumps(summary.to_dict(), indent=2))

    if report:
        generate_summary_report(summary, Path(report))
        click.echo(f"Report written to: {report}")


@cli.command('init-config')
@click.argument('output', type=click.Path())
def init_config(output):
    """Write a default YAML configuration file to OUTPUT."""
    from .config import EngineConfig

    EngineConfig().to_yaml(Path(output))
    click.echo(f"Created config: {output}")


if __name__ == '__main__':
    cli()
