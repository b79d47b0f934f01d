#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for ChainWeaver.

This module provides the main CLI entry point and all subcommands for
merging linear chains and resolving ambiguous vertices in assembly graph
documents.
"""

import logging
import sys
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.schema import (
    ConfigValidationError,
    get_setting,
    load_config,
    require_valid_config,
    save_config_template,
    validate_config,
    VALID_TEMPLATES,
)
from .graph_core.errors import GraphEditError
from .io_utils.graph_records import load_graph_document, save_graph_document
from .session import GraphEditor, Selection


def setup_logging(config, verbose=False, quiet=False):
    """Configure root logging from output.logging and the verbosity flags."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, str(get_setting(config, 'output.logging.level', 'INFO')).upper())

    handlers = [logging.StreamHandler()]
    log_file = get_setting(config, 'output.logging.log_file')
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True), default=None,
              help='YAML configuration file')
@click.pass_context
def main(ctx, verbose, quiet, config_file):
    """
    ChainWeaver: Assembly Graph Chain Merging and Vertex Resolution

    Collapses unbranched linear chains into single merged nodes and splits
    ambiguous vertices into per-path copies, for DOT (logical) and GFA
    (physical, orientation-aware) graphs, keeping saved paths consistent.
    """
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet

    try:
        config = load_config(Path(config_file) if config_file else None)
        require_valid_config(config)
    except (ConfigValidationError, FileNotFoundError) as e:
        click.echo(f"✗ Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj['CONFIG'] = config
    setup_logging(config, verbose=verbose, quiet=quiet)


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='chainweaver_config.yaml',
              help='Output configuration file path')
@click.option('--template', '-t', type=click.Choice(list(VALID_TEMPLATES)),
              default='default', help='Configuration template type')
def config_init(output, template):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating {template} configuration template: {output}")

    try:
        save_config_template(Path(output), template=template)
    except (OSError, ConfigValidationError) as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Configuration file created: {output}")
    click.echo("\nThe configuration file includes:")
    click.echo("  • Graph ingestion defaults (format, segment length/depth)")
    click.echo("  • Merge id prefix")
    click.echo("  • Resolution mode and copy layout radius")
    click.echo("  • Undo history depth and path colors")
    click.echo("  • Output format and logging")


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except ConfigValidationError as e:
        click.echo(f"✗ Error validating configuration: {e}", err=True)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")

    # Show key settings
    click.echo("\nKey Settings:")
    click.echo(f"  Graph format: {config['graph']['format']}")
    click.echo(f"  Resolution mode: {config['resolution']['mode']}")
    click.echo(f"  History depth: {config['history']['max_depth']}")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = load_config(Path(config_file))
    except ConfigValidationError as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        sys.exit(1)

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)

    click.echo("\nGraph:")
    click.echo(f"  Format: {config['graph']['format']}")
    click.echo(f"  Default length: {config['graph']['default_length']}")
    click.echo(f"  Default depth: {config['graph']['default_depth']}")

    click.echo("\nEditing:")
    click.echo(f"  Merge id prefix: {config['merge']['id_prefix']}")
    click.echo(f"  Resolution mode: {config['resolution']['mode']}")
    click.echo(f"  Copy radius: {config['resolution']['copy_radius']}")
    click.echo(f"  History depth: {config['history']['max_depth']}")

    click.echo("\nOutput:")
    click.echo(f"  Document format: {config['output']['format']}")
    click.echo(f"  Log level: {config['output']['logging']['level']}")
    click.echo("=" * 60)


# ============================================================================
# Graph Commands
# ============================================================================

def _open_editor(ctx, graph):
    """Load a graph document into an editing session, or exit with an error."""
    config = ctx.obj['CONFIG']
    try:
        state, paths, report = load_graph_document(
            Path(graph),
            graph_format=get_setting(config, 'graph.format', 'auto'),
            default_length=get_setting(config, 'graph.default_length', 1000),
            default_depth=get_setting(config, 'graph.default_depth', 1.0),
            palette=get_setting(config, 'paths.palette'),
        )
    except (GraphEditError, KeyError, ValueError, FileNotFoundError, yaml.YAMLError) as e:
        click.echo(f"✗ Error loading graph: {e}", err=True)
        ctx.exit(1)
    return GraphEditor(state, paths, config), report


def _write_result(ctx, editor, output):
    if not output:
        click.echo("\n(no --output given; graph document not written)")
        return
    fmt = get_setting(ctx.obj['CONFIG'], 'output.format', 'yaml')
    if Path(output).suffix.lower() == '.json':
        fmt = 'json'
    save_graph_document(Path(output), editor.state, editor.paths, output_format=fmt)
    click.echo(f"\n✓ Graph written to: {output}")


@main.command()
@click.argument('graph', type=click.Path(exists=True))
@click.pass_context
def info(ctx, graph):
    """Show node/edge counts and ingestion diagnostics for a graph document."""
    editor, report = _open_editor(ctx, graph)
    summary = editor.state.summary()

    click.echo(f"Graph: {graph}")
    click.echo("=" * 60)
    click.echo(f"  Format: {summary['format'].upper()}")
    click.echo(f"  Nodes: {summary['nodes']}")
    click.echo(f"  Edges: {summary['edges']}")
    click.echo(f"  Merged nodes: {summary['merged_nodes']}")
    click.echo(f"  Saved paths: {len(editor.paths)}")
    click.echo(f"  Dangling edges dropped: {len(report.dangling_edges)}")
    click.echo(f"  Duplicate edges dropped: {report.duplicate_edges}")

    flagged = [p for p in editor.paths if p.is_flagged]
    if flagged:
        click.echo("\nFlagged paths:")
        for path in flagged:
            click.echo(f"  • {path.name} [{path.flag.value}] {path.sequence_string()}")


@main.command()
@click.argument('graph', type=click.Path(exists=True))
@click.option('--node', '-n', 'node_id', required=True, help='Seed node id')
@click.pass_context
def chain(ctx, graph, node_id):
    """Print the linear chain containing a node."""
    editor, _ = _open_editor(ctx, graph)
    try:
        members = editor.detect_chain(Selection.of(node_id))
    except GraphEditError as e:
        click.echo(f"✗ Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Chain through {node_id} ({len(members)} nodes):")
    click.echo("  " + " → ".join(str(n) for n in members))
    if len(members) < 2:
        click.echo("  (not mergeable: a chain needs at least two nodes)")


@main.command()
@click.argument('graph', type=click.Path(exists=True))
@click.option('--node', '-n', 'node_id', required=True, help='Any node of the chain to merge')
@click.option('--output', '-o', type=click.Path(), default=None,
              help='Output graph document (YAML or JSON)')
@click.pass_context
def merge(ctx, graph, node_id, output):
    """Merge the linear chain through a node into one merged node."""
    editor, _ = _open_editor(ctx, graph)
    try:
        outcome = editor.merge_selected(Selection.of(node_id))
    except GraphEditError as e:
        click.echo(f"✗ Error: {e}", err=True)
        ctx.exit(1)

    merged = outcome.result.merged_node
    click.echo(f"✓ Successfully merged {len(merged.merged_from)} nodes into {merged.id}")
    click.echo(f"  {merged.path_name}")
    click.echo(f"  Total length: {merged.length}")
    click.echo(f"  Average depth: {merged.depth:.2f}")
    click.echo(f"  External connections preserved: {outcome.summary.external_connections_preserved}")
    click.echo("\n" + outcome.path_report.describe())

    _write_result(ctx, editor, output)


@main.command()
@click.argument('graph', type=click.Path(exists=True))
@click.option('--node', '-n', 'node_id', required=True, help='Vertex to inspect')
@click.option('--mode', '-m', type=click.Choice(['auto', 'logical', 'physical']), default=None,
              help='Adjacency model (default: from configuration)')
@click.pass_context
def combinations(ctx, graph, node_id, mode):
    """List the resolution combinations of an ambiguous vertex."""
    editor, _ = _open_editor(ctx, graph)
    try:
        combos = editor.combinations(Selection.of(node_id), mode=mode)
    except GraphEditError as e:
        click.echo(f"✗ Error: {e}", err=True)
        ctx.exit(1)

    resolved_mode = editor.resolution_mode(mode)
    click.echo(f"{resolved_mode.value.capitalize()} combinations for {node_id}:")
    for combo in combos:
        click.echo(f"  [{combo.index}] {combo.description}")


@main.command()
@click.argument('graph', type=click.Path(exists=True))
@click.option('--node', '-n', 'node_id', required=True, help='Vertex to resolve')
@click.option('--keep', '-k', type=int, multiple=True,
              help='Combination index to keep (repeatable; default: all)')
@click.option('--mode', '-m', type=click.Choice(['auto', 'logical', 'physical']), default=None,
              help='Adjacency model (default: from configuration)')
@click.option('--output', '-o', type=click.Path(), default=None,
              help='Output graph document (YAML or JSON)')
@click.pass_context
def resolve(ctx, graph, node_id, keep, mode, output):
    """Split an ambiguous vertex into one copy per kept combination."""
    editor, _ = _open_editor(ctx, graph)
    try:
        outcome = editor.resolve_selected(
            Selection.of(node_id),
            kept=list(keep) if keep else None,
            mode=mode,
        )
    except GraphEditError as e:
        click.echo(f"✗ Error: {e}", err=True)
        ctx.exit(1)

    result = outcome.result
    click.echo(
        f"✓ {result.mode.value.capitalize()} resolution of {result.consumed_id}: "
        f"{len(result.copies)} vertices, {len(result.synthesized_edges)} edges"
    )
    for copy in result.copies:
        click.echo(f"  • {copy.id}: {copy.path_description}")
    click.echo("\n" + outcome.path_report.describe())
    for ambiguous in outcome.path_report.ambiguous:
        click.echo(f"  ⚠ {ambiguous.path_name}: {ambiguous.reason}", err=True)

    _write_result(ctx, editor, output)


@main.command()
def version():
    """Show version and dependency information."""
    click.echo(f"ChainWeaver v{__version__}")
    click.echo("\nDependencies:")

    import numpy
    click.echo(f"  NumPy: {numpy.__version__}")
    click.echo(f"  PyYAML: {yaml.__version__}")


if __name__ == '__main__':
    sys.exit(main())
