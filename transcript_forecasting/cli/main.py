"""Main CLI interface for the transcript forecasting engine

Provides command-line commands for:
- Summarizing trends in transcript counts
- Generating forecasts
- Comparing forecasting models
- Cross-validating a model
- Validating a forecast request against its data

Every command reads a CSV with the columns period_key, entity_id, value.
"""

import json

import click
import pandas as pd
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from transcript_forecasting import __version__
from transcript_forecasting.evaluation.comparison import MODEL_LABELS
from transcript_forecasting.exceptions import ForecastingError
from transcript_forecasting.models import NumericBackend
from transcript_forecasting.pipeline import PredictionOrchestrator
from transcript_forecasting.types import ModelType
from transcript_forecasting.utils.config import ConfigLoader
from transcript_forecasting.utils.logging_config import get_logger, setup_logging


console = Console()
logger = get_logger(__name__)

MODEL_CHOICES = [m.value for m in ModelType]


def load_records(path: str) -> pd.DataFrame:
    """Read count records from a CSV file"""
    df = pd.read_csv(path, dtype={'period_key': str, 'entity_id': str})
    logger.info(f"Loaded {len(df):,} records from {path}")
    return df


def print_json(payload: dict):
    click.echo(json.dumps(payload, indent=2, default=str))


def print_warnings(warnings):
    for warning in warnings:
        console.print(f"[yellow]⚠️  {warning}[/yellow]")


def fail(error: Exception):
    console.print(f"\n[bold red]✗ Error:[/bold red] {error}")
    raise click.Abort()


@click.group()
@click.version_option(version=__version__, prog_name='Transcript Forecasting Engine')
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help='Path to configuration file (default: config/config.yaml)'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default=None,
    help='Logging level (default: from configuration)'
)
@click.pass_context
def cli(ctx, config, log_level):
    """
    Transcript Forecasting Engine

    Trend analytics and forecasts for per-client transcript counts:
    - Linear trend
    - Polynomial trend
    - ARIMA-like autoregressive model
    """
    loader = ConfigLoader(config)
    setup_logging(
        log_level=log_level or loader.get('logging.level', 'INFO'),
        log_file=loader.get('logging.file')
    )

    # One numeric backend for the whole invocation
    ctx.obj = PredictionOrchestrator(loader, backend=NumericBackend())


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--entity', '-e', type=str, default=None, help='Restrict to one entity')
@click.option('--json', 'as_json', is_flag=True, help='Print machine-readable JSON')
@click.pass_obj
def summary(orchestrator, input_file, entity, as_json):
    """
    Summarize statistics, growth and seasonality of transcript counts

    Examples:
      transcript-forecast summary counts.csv
      transcript-forecast summary counts.csv --entity client-42 --json
    """
    try:
        analytics = orchestrator.analyze(load_records(input_file), entity_id=entity)
    except ForecastingError as e:
        fail(e)

    if as_json:
        print_json(analytics.to_dict())
        return

    console.print(Panel.fit(
        f"[bold cyan]Trend Summary - {entity or 'all entities'}[/bold cyan]",
        border_style="cyan"
    ))

    stats = analytics.statistics
    stats_table = Table(title="Statistics", show_header=True, header_style="bold cyan")
    stats_table.add_column("Measure", style="cyan")
    stats_table.add_column("Value", justify="right", style="green")
    for name, value in stats.to_dict().items():
        stats_table.add_row(name.replace('_', ' ').title(), f"{value:,.2f}")
    console.print(stats_table)

    growth = analytics.growth_metrics
    growth_table = Table(title="Growth", show_header=True, header_style="bold cyan")
    growth_table.add_column("Metric", style="cyan")
    growth_table.add_column("Rate", justify="right", style="green")
    growth_table.add_row("Monthly", f"{growth.monthly_growth_rate:+.2f}%")
    growth_table.add_row("Quarterly", f"{growth.quarterly_growth_rate:+.2f}%")
    growth_table.add_row("Year over year", f"{growth.year_over_year_growth:+.2f}%")
    growth_table.add_row("CAGR", f"{growth.cagr:+.2f}%")
    console.print(growth_table)

    trend_table = Table(title="Monthly Trend", show_header=True, header_style="bold cyan")
    trend_table.add_column("Period", style="cyan")
    trend_table.add_column("Count", justify="right")
    trend_table.add_column("Change", justify="right", style="yellow")
    trend_table.add_column("Moving Avg", justify="right", style="dim")
    for point, average in zip(analytics.trends, analytics.moving_average):
        trend_table.add_row(
            point.period_key,
            f"{point.count:,.0f}",
            f"{point.change_percent:+.1f}%",
            f"{average.total:,.0f}"
        )
    console.print(trend_table)


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--horizon', '-h', type=int, default=None, help='Periods to forecast (1-365)')
@click.option('--model', '-m', type=click.Choice(MODEL_CHOICES), default=None, help='Model type')
@click.option('--confidence', type=float, default=None, help='Confidence level in (0, 1)')
@click.option('--entity', '-e', type=str, default=None, help='Restrict to one entity')
@click.option('--json', 'as_json', is_flag=True, help='Print machine-readable JSON')
@click.pass_obj
def forecast(orchestrator, input_file, horizon, model, confidence, entity, as_json):
    """
    Generate forecasts with confidence intervals

    Examples:
      transcript-forecast forecast counts.csv --horizon 6
      transcript-forecast forecast counts.csv -m arima_like --confidence 0.9
    """
    request = orchestrator.build_request(horizon, model, confidence, entity)

    try:
        result = orchestrator.generate_predictions(load_records(input_file), request)
    except ForecastingError as e:
        fail(e)

    if as_json:
        print_json(result.to_dict())
        return

    print_warnings(result.warnings)

    table = Table(
        title=f"{MODEL_LABELS[result.model_type]} Forecast ({entity or 'all entities'})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Period", style="cyan", no_wrap=True)
    table.add_column("Forecast", justify="right", style="green")
    table.add_column("Lower", justify="right", style="dim")
    table.add_column("Upper", justify="right", style="dim")

    for point in result.points:
        table.add_row(
            point.period_key,
            f"{point.predicted_value:,.1f}",
            f"{point.confidence_interval.lower:,.1f}",
            f"{point.confidence_interval.upper:,.1f}"
        )

    console.print(table)

    accuracy_note = " (in-sample)" if result.in_sample_accuracy else ""
    console.print(
        f"\n[bold]Accuracy:[/bold] {result.accuracy:.1%}{accuracy_note}   "
        f"[bold]Confidence:[/bold] {result.confidence:.0%}"
    )


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--entity', '-e', type=str, default=None, help='Restrict to one entity')
@click.option('--json', 'as_json', is_flag=True, help='Print machine-readable JSON')
@click.pass_obj
def compare(orchestrator, input_file, entity, as_json):
    """
    Compare every model type and recommend the best one

    Examples:
      transcript-forecast compare counts.csv
    """
    request = orchestrator.build_request(entity_id=entity)

    try:
        result = orchestrator.compare_models(load_records(input_file), request)
    except ForecastingError as e:
        fail(e)

    if as_json:
        print_json(result.to_dict())
        return

    table = Table(title="Model Comparison", show_header=True, header_style="bold cyan")
    table.add_column("Rank", justify="right", style="dim")
    table.add_column("Model", style="cyan")
    table.add_column("CV Score", justify="right", style="green")
    table.add_column("MAPE", justify="right")
    table.add_column("MAE", justify="right")
    table.add_column("RMSE", justify="right")

    for position, model_type in enumerate(result.ranking, start=1):
        report = result.per_model[model_type]
        table.add_row(
            str(position),
            MODEL_LABELS[model_type],
            f"{result.scores[model_type]:.3f}",
            f"{report.mape:.2f}%",
            f"{report.mae:,.1f}",
            f"{report.rmse:,.1f}"
        )

    for model_type, reason in result.failures.items():
        table.add_row("—", MODEL_LABELS[model_type], "—", "—", "—", "—")
        console.print(f"[yellow]⚠️  {MODEL_LABELS[model_type]} skipped: {reason}[/yellow]")

    console.print(table)
    console.print(Panel(result.recommendation, title="Recommendation", border_style="green"))


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--model', '-m', type=click.Choice(MODEL_CHOICES), default=None, help='Model type')
@click.option('--holdout', type=float, default=None, help='Validation share in (0, 1)')
@click.option('--entity', '-e', type=str, default=None, help='Restrict to one entity')
@click.option('--json', 'as_json', is_flag=True, help='Print machine-readable JSON')
@click.pass_obj
def train(orchestrator, input_file, model, holdout, entity, as_json):
    """
    Cross-validate one model on a chronological train / validation split

    Examples:
      transcript-forecast train counts.csv --model polynomial --holdout 0.25
    """
    request = orchestrator.build_request(model_type=model, entity_id=entity)

    try:
        result = orchestrator.train_model(load_records(input_file), request, holdout)
    except ForecastingError as e:
        fail(e)

    if as_json:
        print_json(result.to_dict())
        return

    table = Table(
        title=f"Training Results - {MODEL_LABELS[ModelType.parse(request.model_type)]}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Split", style="cyan")
    table.add_column("Periods", justify="right", style="dim")
    table.add_column("MAPE", justify="right", style="green")
    table.add_column("MAE", justify="right")
    table.add_column("RMSE", justify="right")
    table.add_column("R²", justify="right")

    for label, size, report in [
        ("Training *", result.training_size, result.training_metrics),
        ("Validation", result.validation_size, result.validation_metrics),
    ]:
        table.add_row(
            label,
            str(size),
            f"{report.mape:.2f}%",
            f"{report.mae:,.1f}",
            f"{report.rmse:,.1f}",
            f"{report.r2:.3f}"
        )

    console.print(table)
    console.print("[dim]* in-sample fit[/dim]")
    console.print(f"\n[bold]Cross-validation score:[/bold] {result.cross_validation_score:.3f}")


@cli.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--horizon', '-h', type=int, default=None, help='Periods to forecast (1-365)')
@click.option('--model', '-m', type=click.Choice(MODEL_CHOICES), default=None, help='Model type')
@click.option('--confidence', type=float, default=None, help='Confidence level in (0, 1)')
@click.option('--entity', '-e', type=str, default=None, help='Restrict to one entity')
@click.option('--json', 'as_json', is_flag=True, help='Print machine-readable JSON')
@click.pass_context
def validate(ctx, input_file, horizon, model, confidence, entity, as_json):
    """
    Validate a forecast request and report data quality

    Exits with status 1 when the request is invalid.

    Examples:
      transcript-forecast validate counts.csv --horizon 12 --model arima_like
    """
    orchestrator = ctx.obj
    request = orchestrator.build_request(horizon, model, confidence, entity)
    records = load_records(input_file)

    validation = orchestrator.validate_request(records, request)

    quality = None
    if validation.is_valid:
        series = orchestrator.aggregator.aggregate_by_period(
            orchestrator.aggregator.filter_entity(records, entity)
        )
        quality = orchestrator.validator.validate_quality(series)

    if as_json:
        print_json({**validation.to_dict(), 'quality': quality})
    else:
        if validation.is_valid:
            console.print("[bold green]✓ Request is valid[/bold green]")
        else:
            console.print("[bold red]✗ Request is invalid[/bold red]")

        for error in validation.errors:
            console.print(f"  [red]✗[/red] {error}")
        print_warnings(validation.warnings)

        if quality is not None:
            table = Table(title="Data Quality", show_header=True, header_style="bold cyan")
            table.add_column("Check", style="cyan")
            table.add_column("Status", justify="center")
            styles = {'pass': 'green', 'warning': 'yellow', 'fail': 'red'}
            for name, report in quality['checks'].items():
                status = report['status']
                table.add_row(
                    name.replace('_', ' ').title(),
                    f"[{styles[status]}]{status}[/{styles[status]}]"
                )
            console.print(table)

    if not validation.is_valid:
        ctx.exit(1)


if __name__ == '__main__':
    cli()
