from __future__ import annotations

from dotenv import load_dotenv
load_dotenv()

from pathlib import Path
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from psmodgen.core.config import ModuleSettings, RunConfig
from psmodgen.core.errors import ModulePathError, PsModGenError
from psmodgen.generation.build import build_module
from psmodgen.generation.regenerator import BatchResult, regenerate_all
from psmodgen.integrations.gallery import GalleryClient, needs_publish
from psmodgen.presets import DEFAULT_SETTINGS, DEFAULT_SETTINGS_FILE, load_settings, save_settings
from psmodgen.reporting.exporters import export_json_report
from psmodgen.versioning.bump import PARTS, bump_module_version, read_module_version


app = typer.Typer(add_completion=False, help="Regenerate PowerShell module loaders (.psm1) and manifests (.psd1).")
console = Console()

ROOT_OPTION = typer.Option(".", "--root", "-r", envvar="PSMODGEN_ROOT", help="Directory that holds the module folders")
CONFIG_OPTION = typer.Option(str(DEFAULT_SETTINGS_FILE), "--config", "-c", help="Settings file (YAML)")


def _load_run_config(root: str, config: str, modules: Optional[List[str]] = None) -> tuple[RunConfig, dict]:
    base = Path(root)
    if not base.is_dir():
        typer.secho(f"Path not found: {base}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    try:
        settings = load_settings(Path(config))
        module_settings = ModuleSettings.from_dict(settings)
    except (yaml.YAMLError, ValueError) as e:
        typer.secho(f"Invalid settings file {config}: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    cfg = RunConfig(
        root=base,
        modules=list(modules or settings.get("modules") or []),
        settings=module_settings,
    )
    return cfg, settings


def _summary_table(batch: BatchResult) -> Table:
    table = Table(title="Regeneration summary")
    table.add_column("Module", overflow="fold")
    table.add_column("Functions", justify="right")
    table.add_column("Aliases", justify="right")
    table.add_column("WIP", justify="right")
    table.add_column("Loader")
    table.add_column("Manifest")
    table.add_column("Warnings", justify="right")
    for res in batch.results:
        loader = res.status_of("loader")
        manifest = res.status_of("manifest")
        table.add_row(
            escape(res.module),
            str(len(res.manifest.functions)),
            str(len(res.manifest.aliases)),
            str(res.wip_excluded),
            loader.value if loader else "-",
            manifest.value if manifest else "-",
            str(len(res.warnings)),
        )
    for name, err in batch.failures.items():
        table.add_row(escape(name), "-", "-", "-", "[red]failed[/]", "[red]failed[/]", escape(err))
    return table


@app.command("regenerate")
def regenerate_cmd(
    modules: Optional[List[str]] = typer.Argument(None, help="Module names (default: from settings, else every module under root)"),
    root: str = ROOT_OPTION,
    config: str = CONFIG_OPTION,
    report: Optional[str] = typer.Option(None, "--report", help="Write a JSON report to this path"),
) -> None:
    """Rewrite each module's .psm1 and .psd1 export lists when the public functions changed."""
    cfg, _ = _load_run_config(root, config, modules)

    console.rule("[bold]Regenerating modules")
    try:
        batch = regenerate_all(cfg, console=console)
    except ModulePathError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    if not batch.results and not batch.failures:
        typer.secho("No modules found.", fg=typer.colors.YELLOW)
        raise typer.Exit(code=0)

    console.print(_summary_table(batch))
    updated = sum(r.files_updated for r in batch.results)
    typer.secho(f"Files updated: {updated}", fg=typer.colors.GREEN if updated else typer.colors.WHITE)

    if report:
        out = export_json_report(batch, cfg.root, Path(report))
        typer.secho(f"Wrote report: {out}", fg=typer.colors.GREEN)

    if not batch.ok:
        raise typer.Exit(code=1)


@app.command("build")
def build_cmd(
    modules: List[str] = typer.Argument(..., help="Module names to build"),
    root: str = ROOT_OPTION,
    config: str = CONFIG_OPTION,
    bump: Optional[str] = typer.Option(None, "--bump", help="Also bump the version: major, minor or patch"),
    validate: bool = typer.Option(True, "--validate/--no-validate", help="Run Test-ModuleManifest after regenerating"),
) -> None:
    """Regenerate, optionally bump the version, and validate each module."""
    if bump and bump not in PARTS:
        typer.secho(f"--bump must be one of: {', '.join(PARTS)}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    cfg, _ = _load_run_config(root, config, modules)

    failed = False
    for name in modules:
        console.rule(f"[bold]Building {name}")
        try:
            res = build_module(cfg.descriptor(name), cfg.settings, bump=bump, validate=validate, console=console)
        except (PsModGenError, OSError) as e:
            typer.secho(f"Build failed for {name}: {e}", fg=typer.colors.RED, err=True)
            failed = True
            continue
        if not res.ok:
            typer.secho(f"Manifest validation failed for {name}", fg=typer.colors.RED, err=True)
            failed = True

    if failed:
        raise typer.Exit(code=1)


@app.command("bump")
def bump_cmd(
    module: str = typer.Argument(..., help="Module name"),
    part: str = typer.Option("patch", "--part", "-p", help="major, minor or patch"),
    root: str = ROOT_OPTION,
    config: str = CONFIG_OPTION,
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the new version without writing it"),
) -> None:
    """Bump ModuleVersion in the module manifest."""
    if part not in PARTS:
        typer.secho(f"--part must be one of: {', '.join(PARTS)}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    cfg, _ = _load_run_config(root, config, [module])
    try:
        change = bump_module_version(cfg.descriptor(module), part, dry_run=dry_run)
    except PsModGenError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    verb = "Would bump" if dry_run else "Bumped"
    typer.secho(f"{verb} {change.module}: {change.old} -> {change.new}", fg=typer.colors.GREEN)


@app.command("status")
def status_cmd(
    modules: Optional[List[str]] = typer.Argument(None, help="Module names (default: from settings, else every module under root)"),
    root: str = ROOT_OPTION,
    config: str = CONFIG_OPTION,
    offline: bool = typer.Option(False, "--offline", help="Skip the PowerShell Gallery lookup"),
) -> None:
    """Compare local manifest versions with the PowerShell Gallery."""
    cfg, settings = _load_run_config(root, config, modules)
    try:
        names = cfg.resolve_modules()
    except ModulePathError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    gallery_cfg = settings.get("gallery") or {}
    client = None if offline else GalleryClient(
        api_base=gallery_cfg.get("api_base", DEFAULT_SETTINGS["gallery"]["api_base"]),
        timeout=float(gallery_cfg.get("timeout", DEFAULT_SETTINGS["gallery"]["timeout"])),
    )

    table = Table(title="Module versions")
    table.add_column("Module", overflow="fold")
    table.add_column("Local", justify="right")
    table.add_column("Gallery", justify="right")
    table.add_column("Publish?")
    errors = False
    for name in names:
        desc = cfg.descriptor(name)
        label = escape(name)
        try:
            local = read_module_version(desc.manifest_path)
        except PsModGenError as e:
            table.add_row(label, "[red]?[/]", "-", f"[red]{escape(str(e))}[/]")
            errors = True
            continue
        if client is None:
            table.add_row(label, escape(local), "-", "-")
            continue
        try:
            published = client.latest_version(name)
            publish = needs_publish(local, published)
        except PsModGenError as e:
            table.add_row(label, escape(local), "[red]?[/]", f"[red]{escape(str(e))}[/]")
            errors = True
            continue
        table.add_row(
            label, escape(local), escape(published or "(not published)"),
            "[yellow]yes[/]" if publish else "no",
        )
    console.print(table)
    if errors:
        raise typer.Exit(code=1)


@app.command("init")
def init_cmd(
    config: str = CONFIG_OPTION,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing settings file"),
) -> None:
    """Write a settings file with the default values."""
    path = Path(config)
    if path.exists() and not force:
        typer.secho(f"{path} already exists (use --force to overwrite)", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)
    out = save_settings(DEFAULT_SETTINGS, path)
    typer.secho(f"Wrote settings: {out}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
