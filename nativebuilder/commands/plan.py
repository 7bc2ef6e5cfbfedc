import click
import json
import os
from .. import config as config_module
from .. import planner
from ..cli_logger import logger
from ..decorators import handle_exceptions
from ..matrix import ALL_VARIANTS, Variant
from ..platforms import parse_platform

GRAPH_FILE = "build-graph.json"


def _load_project_config(path):
    conf = config_module.load_config(path=path)
    if not conf:
        logger.error("Error: No nativebuilder.toml found in the current directory or specified path.")
        logger.info("Please run 'nativebuilder init' to create a new project configuration.")
    return conf


def _make_plan(ctx, platform_name, variant_names):
    conf = _load_project_config(ctx.obj["path"])
    if not conf:
        return None
    host_platform = parse_platform(platform_name) if platform_name else None
    variants = tuple(Variant(name) for name in variant_names) if variant_names else ALL_VARIANTS
    context = planner.create_context(conf, path=ctx.obj["path"], host_platform=host_platform)
    logger.info(f"Planning {context.settings.component} for {context.host_platform.value}...")
    return planner.plan_build(context, variants=variants)


@click.command()
@click.pass_context
@click.option("--platform", "platform_name", default=None,
              help="Plan for this platform family (windows, macos, linux) instead of the host.")
@click.option("--variant", "variant_names", multiple=True, type=click.Choice([v.value for v in Variant]),
              help="Only plan these build variants. Repeatable.")
@click.option("--output", "-o", default=GRAPH_FILE, show_default=True,
              help="Where to write the action graph JSON; '-' writes to stdout.")
@handle_exceptions
def plan(ctx, platform_name, variant_names, output):
    """Resolve toolchains and write the build action graph."""
    build_plan = _make_plan(ctx, platform_name, variant_names)
    if build_plan is None:
        return False

    document = json.dumps(build_plan.to_dict(), indent=2)
    if output == "-":
        click.echo(document)
    else:
        output_path = os.path.join(ctx.obj["path"], output)
        with open(output_path, "w") as f:
            f.write(document + "\n")
        logger.success(
            f"Planned {len(build_plan.pipelines)} configurations, "
            f"{len(build_plan.graph.actions)} actions. Graph written to {output_path}"
        )
    return True


@click.command()
@click.pass_context
@click.option("--platform", "platform_name", default=None,
              help="List targets for this platform family instead of the host.")
@handle_exceptions
def targets(ctx, platform_name):
    """List the install and package targets of every configuration."""
    build_plan = _make_plan(ctx, platform_name, ())
    if build_plan is None:
        return False
    for pipeline in build_plan.pipelines:
        click.echo(f"{pipeline.install_alias}\t{pipeline.key}")
        click.echo(f"{pipeline.package_alias}\t{pipeline.artifact.path}")
    return True
