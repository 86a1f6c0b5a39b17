import click
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel

from sitestack.application.config_loader import load_build_config
from sitestack.interface.cli.output_models import BuildOutput, ListOutput, WrittenFile

logger = logging.getLogger(__name__)


def _json_emit(model: BaseModel) -> None:
    # Single-line JSON, omit None fields (e.g., BuildOutput.output_dir on error).
    click.echo(model.model_dump_json(exclude_none=True), nl=True)


def _get_json_mode(ctx: click.Context) -> bool:
    obj = ctx.obj or {}
    return bool(obj.get("json", False))


def _load_data(data_file: str | None) -> dict[str, Any]:
    """Read the base render context from a YAML or JSON file."""
    if data_file is None:
        return {}
    data = yaml.safe_load(Path(data_file).read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Data file root must be a mapping: {data_file}")
    return data


def _make_builder(source: str | None, output: str | None, events: bool):
    from sitestack.application.site_builder import SiteBuilder
    from sitestack.domain.events import RenderEventEmitter

    config = load_build_config(
        project_root=Path.cwd(),
        user_home=Path.home(),
        overrides={"source_dir": source, "output_dir": output},
    )

    emitter = RenderEventEmitter()
    if events:
        from sitestack.domain.events import StderrEventObserver
        emitter.subscribe(StderrEventObserver())

    return SiteBuilder(config, project_root=Path.cwd(), emitter=emitter)


@click.group(help="Hierarchical static site renderer.")
@click.option("--json", "json_output", is_flag=True, help="Emit machine-readable JSON on stdout.")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def cli(ctx: click.Context, json_output: bool, verbose: bool) -> None:
    ctx.ensure_object(dict)
    ctx.obj["json"] = bool(json_output)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command("build")
@click.option("--source", "source", required=False, type=str, help="Source directory (overrides config).")
@click.option("--output", "output", required=False, type=str, help="Output directory (overrides config).")
@click.option("--data", "data_file", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--events", is_flag=True, help="Emit render events to stderr.")
@click.pass_context
def build_cmd(
    ctx: click.Context,
    source: str | None,
    output: str | None,
    data_file: str | None,
    events: bool,
) -> None:
    """Render the source tree and write it to the output directory."""
    try:
        builder = _make_builder(source, output, events)
        written = builder.build(_load_data(data_file))

        if _get_json_mode(ctx):
            _json_emit(
                BuildOutput(
                    exit_code=0,
                    output_dir=str(builder.output_dir),
                    files=[WrittenFile(path=f.path, sha256=f.sha256) for f in written],
                    total=len(written),
                )
            )
            raise click.exceptions.Exit(0)

        for f in written:
            click.echo(f.path)
        click.echo(f"Wrote {len(written)} files to {builder.output_dir}")

    except click.exceptions.Exit:
        raise
    except Exception as e:
        if _get_json_mode(ctx):
            _json_emit(
                BuildOutput(
                    exit_code=1,
                    error=str(e),
                )
            )
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e)) from e


@cli.command("list")
@click.option("--source", "source", required=False, type=str, help="Source directory (overrides config).")
@click.option("--data", "data_file", required=False, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def list_cmd(ctx: click.Context, source: str | None, data_file: str | None) -> None:
    """List registered templates and the output paths they render to."""
    try:
        builder = _make_builder(source, None, False)
        engine = builder.load()
        templates = list(engine.templates.paths())
        outputs = sorted(builder.render(_load_data(data_file)))

        if _get_json_mode(ctx):
            _json_emit(
                ListOutput(
                    exit_code=0,
                    source_dir=str(builder.source_dir),
                    templates=templates,
                    outputs=outputs,
                    total=len(outputs),
                )
            )
            raise click.exceptions.Exit(0)

        if not outputs:
            click.echo("No outputs found.")
        else:
            for path in outputs:
                click.echo(path)

    except click.exceptions.Exit:
        raise
    except Exception as e:
        if _get_json_mode(ctx):
            _json_emit(
                ListOutput(
                    exit_code=1,
                    error=str(e),
                )
            )
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e)) from e
