"""
cinescript.cli - Typer CLI entry point.

Every command opens the workspace session, issues one intent and prints
the result. Shots can be referred to by number within the active scene,
scenes by their number label, and anything by a unique ID prefix.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from cinescript import __version__
from cinescript.exceptions import CineScriptError, CollaboratorError, WorkspaceError
from cinescript.logging import configure_logging
from cinescript.models import (
    CameraAngle,
    CameraMovement,
    FocusType,
    Lighting,
    Project,
    Scene,
    Shot,
    ShotFraming,
    ShotSize,
    ShotStatus,
    TimeOfDay,
    parse_enum,
)
from cinescript.session import ShotListSession, Snapshot
from cinescript.workspace import Workspace, find_workspace_dir

app = typer.Typer(
    name="cinescript",
    help="Shot list manager for film productions.\n\n"
    "Organise projects into scenes and numbered shots, with AI-assisted "
    "shot details and storyboard frames.",
    add_completion=False,
)
project_app = typer.Typer(help="Manage projects.", no_args_is_help=True)
scene_app = typer.Typer(help="Manage scenes of the current project.", no_args_is_help=True)
shot_app = typer.Typer(help="Manage shots of the active scene.", no_args_is_help=True)
app.add_typer(project_app, name="project")
app.add_typer(scene_app, name="scene")
app.add_typer(shot_app, name="shot")

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"cinescript {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """CineScript - shot list manager for film productions."""
    configure_logging(verbose)


def open_workspace() -> tuple[Workspace, ShotListSession]:
    workspace_dir = find_workspace_dir()
    if not workspace_dir:
        console.print("[red]Error: Not in a CineScript workspace[/red]")
        console.print("[dim]Run 'cinescript init' first or cd into a workspace directory[/dim]")
        raise typer.Exit(1)

    workspace = Workspace(workspace_dir)
    try:
        return workspace, workspace.open_session()
    except (CineScriptError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def report(snapshot: Snapshot) -> None:
    if snapshot.warning:
        console.print(f"[yellow]Warning: {snapshot.warning}[/yellow]")


def fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(1)


def resolve_project(session: ShotListSession, ref: str) -> Project:
    exact = [p for p in session.projects if p.id == ref]
    matches = exact or [p for p in session.projects if p.id.startswith(ref)]
    if len(matches) != 1:
        fail(f"No unique project matches '{ref}'")
    return matches[0]


def resolve_scene(session: ShotListSession, ref: str) -> Scene:
    scenes = session.current_project.scenes if session.current_project else []
    matches = (
        [s for s in scenes if s.id == ref]
        or [s for s in scenes if s.number == ref]
        or [s for s in scenes if s.id.startswith(ref)]
    )
    if len(matches) != 1:
        fail(f"No unique scene matches '{ref}'")
    return matches[0]


def active_scene(session: ShotListSession, scene_ref: str | None) -> Scene:
    if scene_ref:
        return resolve_scene(session, scene_ref)
    scene = session.active_scene
    if scene is None:
        fail("No active scene. Add one with 'cinescript scene add'")
    return scene


def resolve_shot(scene: Scene, ref: str) -> Shot:
    if ref.isdigit():
        matches = [s for s in scene.shots if s.number == int(ref)]
    else:
        matches = [s for s in scene.shots if s.id == ref] or [
            s for s in scene.shots if s.id.startswith(ref)
        ]
    if len(matches) != 1:
        fail(f"No unique shot matches '{ref}' in scene {scene.label}")
    return matches[0]


def enum_option(enum_cls: type[Enum], value: str | None, name: str) -> Enum | None:
    if value is None:
        return None
    parsed = parse_enum(enum_cls, value)
    if parsed is None:
        choices = ", ".join(m.value for m in enum_cls)
        fail(f"Invalid {name} '{value}'. Choose one of: {choices}")
    return parsed


def updates_from(**options: object) -> dict[str, object]:
    return {key: value for key, value in options.items() if value is not None}


# Workspace


@app.command("init")
def init_workspace(
    name: str = typer.Argument(..., help="Workspace name"),
    path: str = typer.Option(".", "--path", "-d", help="Directory to create workspace in"),
) -> None:
    """Create a new CineScript workspace with a demo project."""
    workspace_path = Path(path) / name

    if workspace_path.exists():
        console.print(f"[red]Error: Directory '{workspace_path}' already exists[/red]")
        raise typer.Exit(1)

    try:
        session = Workspace(workspace_path).create()
    except (WorkspaceError, OSError) as e:
        console.print(f"[red]Error creating workspace: {e}[/red]")
        raise typer.Exit(1)

    project = session.current_project
    console.print(f"[green]✓[/green] Created workspace '{name}'")
    console.print(f"[dim]  {workspace_path}[/dim]")
    if project is not None:
        console.print(f"[dim]  Opened demo project '{project.name}'[/dim]")
    console.print("\nNext steps:")
    console.print(f"  cd {name}")
    console.print("  cinescript project new")


@app.command("status")
def show_status() -> None:
    """Show the current project, active scene and its shots."""
    _, session = open_workspace()
    project = session.current_project
    if project is None:
        console.print("[yellow]No projects[/yellow]")
        return

    console.print(f"[bold]{project.name}[/bold] [dim]{project.id}[/dim]")
    console.print(f"[dim]Director: {project.director} · DOP: {project.dop}[/dim]")
    if project.description:
        console.print(f"[dim]{project.description}[/dim]")

    scenes = Table(title="Scenes")
    scenes.add_column("", width=1)
    scenes.add_column("Scene", style="cyan")
    scenes.add_column("Setting")
    scenes.add_column("Shots", justify="right", style="green")
    for scene in project.scenes:
        marker = "▶" if scene.id == session.selection.active_scene_id else ""
        setting = f"{scene.time_of_day.value}. {scene.location} - {scene.lighting.value}"
        scenes.add_row(marker, scene.label, setting, str(len(scene.shots)))
    console.print(scenes)

    scene = session.active_scene
    if scene is None:
        console.print("[dim]No scenes yet. Add one with 'cinescript scene add'[/dim]")
        return
    print_shots(scene)


def print_shots(scene: Scene) -> None:
    table = Table(title=f"Shots - {scene.label}")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Size")
    table.add_column("Angle")
    table.add_column("Movement")
    table.add_column("Lens")
    table.add_column("Description")
    table.add_column("Status", style="yellow")
    for shot in scene.shots:
        table.add_row(
            str(shot.number),
            shot.size.value,
            shot.angle.value,
            shot.movement.value,
            shot.lens,
            shot.description,
            shot.status.value if shot.status else "",
        )
    console.print(table)


# Projects


@project_app.command("list")
def list_projects() -> None:
    """List all projects."""
    _, session = open_workspace()
    table = Table(title="Projects")
    table.add_column("", width=1)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Director")
    table.add_column("Scenes", justify="right", style="green")
    for project in session.projects:
        marker = "▶" if project.id == session.selection.current_project_id else ""
        table.add_row(marker, project.id, project.name, project.director, str(len(project.scenes)))
    console.print(table)


@project_app.command("new")
def new_project() -> None:
    """Create a blank project and switch to it."""
    _, session = open_workspace()
    snapshot = session.create_project()
    report(snapshot)
    console.print(f"[green]✓[/green] Created project {snapshot.created_id}")


@project_app.command("switch")
def switch_project(project_ref: str = typer.Argument(..., help="Project ID or prefix")) -> None:
    """Make another project current."""
    _, session = open_workspace()
    project = resolve_project(session, project_ref)
    report(session.switch_project(project.id))
    console.print(f"[green]✓[/green] Switched to '{project.name}'")


@project_app.command("edit")
def edit_project(
    name: str | None = typer.Option(None, "--name", "-n"),
    description: str | None = typer.Option(None, "--description"),
    director: str | None = typer.Option(None, "--director"),
    dop: str | None = typer.Option(None, "--dop", help="Director of photography"),
) -> None:
    """Edit the current project's details."""
    _, session = open_workspace()
    project = session.current_project
    if project is None:
        fail("No current project")
    updates = updates_from(name=name, description=description, director=director, dop=dop)
    if not updates:
        console.print("[yellow]Nothing to change[/yellow]")
        return
    report(session.update_project(project.model_copy(update=updates)))
    console.print(f"[green]✓[/green] Updated project '{updates.get('name', project.name)}'")


@project_app.command("delete")
def delete_project(
    project_ref: str = typer.Argument(..., help="Project ID or prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
) -> None:
    """Delete a project with all its scenes and shots."""
    _, session = open_workspace()
    project = resolve_project(session, project_ref)
    if not yes and not typer.confirm(f"Delete project '{project.name}'?"):
        raise typer.Exit(0)
    snapshot = session.delete_project(project.id)
    report(snapshot)
    console.print(f"[green]✓[/green] Deleted project '{project.name}'")
    current = snapshot.current_project
    if current is not None:
        console.print(f"[dim]  Current project: {current.name}[/dim]")


# Scenes


@scene_app.command("add")
def add_scene() -> None:
    """Append a blank scene to the current project and make it active."""
    workspace, session = open_workspace()
    snapshot = session.create_scene()
    report(snapshot)
    scene = snapshot.active_scene
    if snapshot.created_id is None or scene is None:
        fail("No current project")
    workspace.remember_scene(session)
    console.print(f"[green]✓[/green] Added scene {scene.label}")


@scene_app.command("select")
def select_scene(scene_ref: str = typer.Argument(..., help="Scene number or ID")) -> None:
    """Make a scene active."""
    workspace, session = open_workspace()
    scene = resolve_scene(session, scene_ref)
    report(session.select_scene(scene.id))
    workspace.remember_scene(session)
    console.print(f"[green]✓[/green] Active scene: {scene.label}")


@scene_app.command("edit")
def edit_scene(
    scene_ref: str = typer.Argument(..., help="Scene number or ID"),
    number: str | None = typer.Option(None, "--number"),
    title: str | None = typer.Option(None, "--title"),
    location: str | None = typer.Option(None, "--location"),
    time_of_day: str | None = typer.Option(None, "--time", help="INT or EXT"),
    lighting: str | None = typer.Option(
        None, "--lighting", help="DAY, NIGHT, MAGIC HOUR or ARTIFICIAL"
    ),
) -> None:
    """Edit a scene's heading details."""
    _, session = open_workspace()
    scene = resolve_scene(session, scene_ref)
    updates = updates_from(
        number=number,
        title=title,
        location=location,
        time_of_day=enum_option(TimeOfDay, time_of_day, "time of day"),
        lighting=enum_option(Lighting, lighting, "lighting"),
    )
    if not updates:
        console.print("[yellow]Nothing to change[/yellow]")
        return
    snapshot = session.update_scene(scene.model_copy(update=updates))
    report(snapshot)
    console.print(f"[green]✓[/green] Updated scene {scene.label}")


@scene_app.command("delete")
def delete_scene(
    scene_ref: str = typer.Argument(..., help="Scene number or ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
) -> None:
    """Delete a scene and all of its shots."""
    _, session = open_workspace()
    scene = resolve_scene(session, scene_ref)
    if not yes and not typer.confirm(f"Delete scene {scene.label} and {len(scene.shots)} shot(s)?"):
        raise typer.Exit(0)
    snapshot = session.delete_scene(scene.id)
    report(snapshot)
    console.print(f"[green]✓[/green] Deleted scene {scene.label}")
    if snapshot.active_scene is not None:
        console.print(f"[dim]  Active scene: {snapshot.active_scene.label}[/dim]")


# Shots


@shot_app.command("list")
def list_shots(
    scene_ref: str | None = typer.Option(None, "--scene", "-s", help="Scene number or ID"),
) -> None:
    """List shots of the active scene."""
    _, session = open_workspace()
    print_shots(active_scene(session, scene_ref))


@shot_app.command("add")
def add_shot(
    scene_ref: str | None = typer.Option(None, "--scene", "-s", help="Scene number or ID"),
) -> None:
    """Append a blank shot to a scene."""
    _, session = open_workspace()
    scene = active_scene(session, scene_ref)
    snapshot = session.add_shot(scene.id)
    report(snapshot)
    shot = snapshot.selection.active_shot
    number = shot.number if shot else len(scene.shots) + 1
    console.print(f"[green]✓[/green] Added shot {number} to scene {scene.label}")


@shot_app.command("edit")
def edit_shot(
    shot_ref: str = typer.Argument(..., help="Shot number or ID"),
    scene_ref: str | None = typer.Option(None, "--scene", "-s", help="Scene number or ID"),
    description: str | None = typer.Option(None, "--description", "-d"),
    notes: str | None = typer.Option(None, "--notes"),
    size: str | None = typer.Option(None, "--size"),
    angle: str | None = typer.Option(None, "--angle"),
    movement: str | None = typer.Option(None, "--movement"),
    framing: str | None = typer.Option(None, "--framing"),
    focus: str | None = typer.Option(None, "--focus"),
    lens: str | None = typer.Option(None, "--lens"),
    camera: str | None = typer.Option(None, "--camera"),
    aperture: str | None = typer.Option(None, "--aperture"),
    fps: int | None = typer.Option(None, "--fps"),
    resolution: str | None = typer.Option(None, "--resolution"),
    color_temp: str | None = typer.Option(None, "--color-temp"),
    timecode: str | None = typer.Option(None, "--timecode"),
    takes: int | None = typer.Option(None, "--takes", min=0),
    status: str | None = typer.Option(None, "--status"),
    ad_notes: str | None = typer.Option(None, "--ad-notes"),
) -> None:
    """Edit a shot's composition, technical and AD fields."""
    _, session = open_workspace()
    scene = active_scene(session, scene_ref)
    shot = resolve_shot(scene, shot_ref)
    updates = updates_from(
        description=description,
        notes=notes,
        size=enum_option(ShotSize, size, "size"),
        angle=enum_option(CameraAngle, angle, "angle"),
        movement=enum_option(CameraMovement, movement, "movement"),
        framing=enum_option(ShotFraming, framing, "framing"),
        focus=enum_option(FocusType, focus, "focus"),
        lens=lens,
        camera=camera,
        aperture=aperture,
        fps=fps,
        resolution=resolution,
        color_temp=color_temp,
        timecode=timecode,
        takes=takes,
        status=enum_option(ShotStatus, status, "status"),
        ad_notes=ad_notes,
    )
    if not updates:
        console.print("[yellow]Nothing to change[/yellow]")
        return
    report(session.update_shot(shot.model_copy(update=updates), scene.id))
    console.print(f"[green]✓[/green] Updated shot {shot.number} in scene {scene.label}")


@shot_app.command("delete")
def delete_shot(
    shot_ref: str = typer.Argument(..., help="Shot number or ID"),
    scene_ref: str | None = typer.Option(None, "--scene", "-s", help="Scene number or ID"),
) -> None:
    """Delete a shot and renumber the rest."""
    _, session = open_workspace()
    scene = active_scene(session, scene_ref)
    shot = resolve_shot(scene, shot_ref)
    report(session.delete_shot(shot.id, scene.id))
    console.print(f"[green]✓[/green] Deleted shot {shot.number} from scene {scene.label}")


class MoveDirection(str, Enum):
    up = "up"
    down = "down"


@shot_app.command("move")
def move_shot(
    shot_ref: str = typer.Argument(..., help="Shot number or ID"),
    direction: MoveDirection = typer.Argument(..., help="up or down"),
    scene_ref: str | None = typer.Option(None, "--scene", "-s", help="Scene number or ID"),
) -> None:
    """Swap a shot with its neighbour."""
    _, session = open_workspace()
    scene = active_scene(session, scene_ref)
    shot = resolve_shot(scene, shot_ref)
    snapshot = session.move_shot(shot.id, direction.value, scene.id)
    report(snapshot)
    moved = session.find_shot(shot.id, scene.id)
    if moved is None or moved.number == shot.number:
        edge = "top" if direction is MoveDirection.up else "bottom"
        console.print(f"[dim]Shot {shot.number} is already at the {edge}[/dim]")
        return
    console.print(f"[green]✓[/green] Moved shot {shot.number} to position {moved.number}")


# AI collaborators


@app.command("suggest")
def suggest_details(
    shot_ref: str = typer.Argument(..., help="Shot number or ID"),
    scene_ref: str | None = typer.Option(None, "--scene", "-s", help="Scene number or ID"),
    apply: bool = typer.Option(True, "--apply/--no-apply", help="Save the suggestion to the shot"),
) -> None:
    """Suggest lens, camera and composition for a shot from its description.

    The result is discarded if the shot changes during the request in this
    process; edits made by another cinescript command meanwhile are not
    detected.
    """
    workspace, session = open_workspace()
    scene = active_scene(session, scene_ref)
    shot = resolve_shot(scene, shot_ref)

    from cinescript.llm.client import create_client_from_config
    from cinescript.llm.enrich import shot_brief, suggest_shot_details
    from cinescript.llm.templates import PromptTemplateManager

    token = session.request_token(shot.id, scene.id)
    client = create_client_from_config(workspace.config)
    console.print(f"[cyan]Asking {client.model} for shot details...[/cyan]")
    try:
        suggestion = suggest_shot_details(
            client,
            shot_brief(shot),
            template_manager=PromptTemplateManager(workspace.prompts_dir),
            console=console,
        )
    except CollaboratorError as e:
        fail(str(e))

    fields = suggestion.model_dump(mode="json", exclude_none=True)
    if not fields:
        console.print("[yellow]No usable suggestions returned[/yellow]")
        return

    table = Table(title=f"Suggestions for shot {shot.number}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in fields.items():
        table.add_row(key, str(value))
    console.print(table)

    if apply and token is not None:
        snapshot = session.apply_suggestion(token, suggestion)
        report(snapshot)
        if not snapshot.warning:
            console.print(f"[green]✓[/green] Applied to shot {shot.number}")


@app.command("image")
def shot_image(
    shot_ref: str = typer.Argument(..., help="Shot number or ID"),
    scene_ref: str | None = typer.Option(None, "--scene", "-s", help="Scene number or ID"),
    prompt: str | None = typer.Option(
        None, "--prompt", "-p", help="Image prompt or edit instruction"
    ),
    refine: bool = typer.Option(False, "--refine", help="Rewrite the prompt with the LLM first"),
    clear: bool = typer.Option(False, "--clear", help="Remove the shot's image"),
) -> None:
    """Generate a storyboard frame for a shot, or edit its existing one.

    Edits made by another cinescript command while the image is generated
    are not detected; the last write wins.
    """
    workspace, session = open_workspace()
    scene = active_scene(session, scene_ref)
    shot = resolve_shot(scene, shot_ref)

    if clear:
        report(session.update_shot(shot.model_copy(update={"image_url": None}), scene.id))
        console.print(f"[green]✓[/green] Removed image from shot {shot.number}")
        return

    from cinescript.llm.client import create_client_from_config
    from cinescript.llm.enrich import default_image_prompt, refine_image_prompt
    from cinescript.llm.images import edit_image, generate_image
    from cinescript.llm.templates import PromptTemplateManager

    token = session.request_token(shot.id, scene.id)
    if token is None:
        fail(f"Shot {shot.number} no longer exists")
    client = create_client_from_config(workspace.config)
    text = prompt or default_image_prompt(shot)
    if not text:
        fail("Shot has no description; pass --prompt")

    try:
        if refine:
            text = refine_image_prompt(
                client,
                text,
                template_manager=PromptTemplateManager(workspace.prompts_dir),
                console=console,
            )
            console.print(f"[dim]  Prompt: {text}[/dim]")
        if shot.image_url:
            console.print("[cyan]Editing existing image...[/cyan]")
            image_url = edit_image(client, shot.image_url, text, console=console)
        else:
            console.print("[cyan]Generating image...[/cyan]")
            image_url = generate_image(client, text, console=console)
    except CollaboratorError as e:
        fail(str(e))

    snapshot = session.apply_image(token, image_url)
    report(snapshot)
    if not snapshot.warning:
        console.print(f"[green]✓[/green] Updated image for shot {shot.number}")


# Export


@app.command("export")
def export_csv(
    output: str | None = typer.Option(None, "--output", "-o", help="Output file path"),
) -> None:
    """Export the current project's shot chart as CSV."""
    workspace, session = open_workspace()
    project = session.current_project
    if project is None:
        fail("No current project")

    from cinescript.export.csv import export_filename, write_csv

    output_path = Path(output) if output else workspace.export_dir / export_filename(project)
    try:
        write_csv(project, output_path)
    except CineScriptError as e:
        fail(str(e))

    shot_count = sum(len(s.shots) for s in project.scenes)
    console.print(f"[green]✓[/green] Exported {shot_count} shot(s) to {output_path}")


if __name__ == "__main__":
    app()
