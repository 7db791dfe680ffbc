import click
from dataclasses import replace
from pathlib import Path

from .core import Settings, PROFILES, apply_profile, setup_logging, BddE2EError
from .executor import TestExecutor, ReportCollector
from . import __version__


@click.group()
@click.version_option(__version__, prog_name="bdd-e2e")
@click.option('--config', '-c', type=click.Path(), help='YAML configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config, verbose):
    """BDD E2E - run Gherkin scenarios against Playwright"""
    try:
        settings = Settings.from_env(config_path=Path(config) if config else None)
    except BddE2EError as e:
        raise click.ClickException(str(e))

    if verbose:
        settings = replace(settings, debug_mode=True)

    ctx.obj = settings


@cli.command()
@click.argument('features', default='features', type=click.Path())
@click.option('--profile', '-p', default='default', type=click.Choice(list(PROFILES)),
              help='Run profile')
@click.option('--tags', '-t', help='Cucumber tag expression, e.g. "@smoke and not @wip"')
@click.option('--workers', '-w', type=int, help='Number of parallel browsers')
@click.option('--retries', '-r', type=int, help='Retries for failed scenarios')
@click.option('--browser', '-b', type=click.Choice(['chromium', 'firefox', 'webkit']), help='Browser to use')
@click.option('--headed', is_flag=True, help='Show the browser window')
@click.pass_obj
def run(settings, features, profile, tags, workers, retries, browser, headed):
    """
    Execute feature files

    Examples:
        bdd-e2e run features/
        bdd-e2e run features/login.feature --tags "@regression"
        bdd-e2e run --profile ci --headed
    """
    settings = apply_profile(settings, profile)

    overrides = {}
    if tags is not None:
        overrides['tags'] = tags
    if workers is not None:
        overrides['workers'] = workers
    if retries is not None:
        overrides['retries'] = retries
    if browser:
        overrides['browser'] = browser
    if headed:
        overrides['headless'] = False
    settings = replace(settings, **overrides)

    logger = setup_logging(settings)

    try:
        executor = TestExecutor(settings)
        results = executor.execute(features)
    except (BddE2EError, FileNotFoundError) as e:
        raise click.ClickException(str(e))

    summary = results['summary']
    click.echo(f"\n{summary['total']} scenario(s): {summary['passed']} passed, {summary['failed']} failed")
    click.echo(f"Reports: {executor.report_collector.json_path}, {executor.report_collector.html_path}")

    if summary['failed']:
        logger.error(f"{summary['failed']} scenario(s) failed")
        raise SystemExit(1)


@cli.command()
@click.option('--input', '-i', 'json_path', type=click.Path(), help='Cucumber JSON report')
@click.option('--output', '-o', 'html_path', type=click.Path(), help='Summary HTML file')
@click.pass_obj
def report(settings, json_path, html_path):
    """Generate the summary HTML report from the last run"""
    collector = ReportCollector(settings.reports_dir)

    try:
        path = collector.generate_summary(json_path, html_path)
    except FileNotFoundError as e:
        click.echo(f"Error: {e}. Run the tests first.", err=True)
        raise SystemExit(1)

    click.echo(f"✅ Report generated: {path}")


@cli.command()
@click.option('--keyword', '-k', type=click.Choice(['given', 'when', 'then']), help='Filter by keyword')
@click.pass_obj
def steps(settings, keyword):
    """List available step definitions"""
    executor = TestExecutor(settings)

    for definition in executor.list_all_steps():
        if keyword and definition['keyword'] != keyword:
            continue
        click.echo(f"{definition['keyword'].capitalize():6} {definition['pattern']}")


def main():
    cli()


if __name__ == '__main__':
    main()
