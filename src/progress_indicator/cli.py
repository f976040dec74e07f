"""CLI entry point for progress-indicator."""

from pathlib import Path

import click

from progress_indicator import __version__
from progress_indicator.config import RENDERERS, load_config
from progress_indicator.logging import setup_logging

DEMO_SESSION_ID = "demo"


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to config file.",
)
@click.option(
    "--renderer",
    "-r",
    type=click.Choice(RENDERERS),
    default=None,
    help="Override the configured renderer.",
)
@click.pass_context
def main(ctx: click.Context, config: Path | None, renderer: str | None) -> None:
    """progress-indicator - Track long-running operations on screen."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config)
    if renderer is not None:
        ctx.obj["config"].renderer = renderer
    ctx.obj["logger"] = setup_logging(ctx.obj["config"])


@main.command()
def version() -> None:
    """Show version."""
    click.echo(f"progress-indicator version {__version__}")


def _build_registry(ctx: click.Context):
    from progress_indicator.errors import ConfigError
    from progress_indicator.renderer_factory import create_registry, create_renderer

    config = ctx.obj["config"]
    try:
        renderer = create_renderer(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    return create_registry(config, renderer), renderer


def request_cancel(renderer) -> list[str]:
    """Deliver a user cancel request through the renderer's cancel trigger.

    Returns:
        Ids of the sessions the renderer reported as cancelled.
    """
    from progress_indicator.renderers import MarkupRenderer, TerminalRenderer

    if isinstance(renderer, TerminalRenderer):
        return [sid for sid in renderer.cancellable_ids() if renderer.interrupt(sid)]
    if isinstance(renderer, MarkupRenderer):
        return [DEMO_SESSION_ID] if renderer.click_cancel(DEMO_SESSION_ID) else []
    return []


@main.command()
@click.option("--steps", default=5, show_default=True, help="Steps per phase.")
@click.option(
    "--phases",
    default="prepare,process,finish",
    show_default=True,
    help="Comma-separated phase names.",
)
@click.option("--cancellable/--no-cancellable", default=True, show_default=True)
@click.option("--delay", default=0.2, show_default=True, help="Seconds per step.")
@click.pass_context
def demo(
    ctx: click.Context, steps: int, phases: str, cancellable: bool, delay: float
) -> None:
    """Run a simulated multi-phase operation. Ctrl+C cancels it."""
    import asyncio
    import signal

    from progress_indicator.renderers import MarkupRenderer

    registry, renderer = _build_registry(ctx)
    phase_names = [name.strip() for name in phases.split(",") if name.strip()]
    steps = max(1, steps)

    async def _demo() -> bool:
        cancelled = asyncio.Event()
        loop = asyncio.get_running_loop()

        registry.show(
            DEMO_SESSION_ID,
            title="Demo",
            message="Starting...",
            phases=phase_names,
            cancellable=cancellable,
            on_cancel=cancelled.set,
        )

        has_signal_handler = False
        if cancellable:
            try:
                loop.add_signal_handler(signal.SIGINT, request_cancel, renderer)
                has_signal_handler = True
            except (NotImplementedError, RuntimeError):
                pass

        try:
            total = max(1, len(phase_names)) * steps
            done = 0
            for index, name in enumerate(phase_names or ["work"]):
                registry.update(
                    DEMO_SESSION_ID, phase=index, message=f"Running {name}..."
                )
                for _ in range(steps):
                    if cancelled.is_set():
                        return False
                    await asyncio.sleep(delay)
                    done += 1
                    registry.update(
                        DEMO_SESSION_ID,
                        progress=done * 100 / total,
                        show_elapsed=True,
                    )
                if isinstance(renderer, MarkupRenderer):
                    markup = renderer.render(DEMO_SESSION_ID)
                    if markup is not None:
                        click.echo(markup)
            return not cancelled.is_set()
        finally:
            if has_signal_handler:
                loop.remove_signal_handler(signal.SIGINT)
            registry.dispose()

    completed = asyncio.run(_demo())
    if completed:
        click.echo("Demo completed")
    else:
        click.echo("Demo cancelled")


@main.command()
@click.argument("message")
@click.option(
    "--duration",
    type=int,
    default=None,
    help="Display time in milliseconds (config default if omitted).",
)
@click.pass_context
def notify(ctx: click.Context, message: str, duration: int | None) -> None:
    """Show a notification until it hides itself."""
    import asyncio

    registry, _ = _build_registry(ctx)

    async def _notify() -> None:
        session_id = registry.show_notification(message, duration)
        while registry.is_active(session_id):
            await asyncio.sleep(0.05)
        registry.dispose()

    asyncio.run(_notify())


@main.command()
@click.option("--title", default="Processing...", show_default=True)
@click.option("--message", default="Please wait...", show_default=True)
@click.option("--progress", type=float, default=None, help="Percentage to show.")
@click.option("--phases", default="", help="Comma-separated phase names.")
@click.option("--phase", type=int, default=None, help="Active phase index.")
@click.option("--compact", is_flag=True, default=False)
@click.option("--cancellable", is_flag=True, default=False)
def render(
    title: str,
    message: str,
    progress: float | None,
    phases: str,
    phase: int | None,
    compact: bool,
    cancellable: bool,
) -> None:
    """Print the HTML markup of a sample session."""
    from progress_indicator.registry import SessionRegistry
    from progress_indicator.renderers import MarkupRenderer

    renderer = MarkupRenderer()
    registry = SessionRegistry(renderer)
    phase_names = [name.strip() for name in phases.split(",") if name.strip()]

    registry.show(
        "sample",
        title=title,
        message=message,
        phases=phase_names or None,
        compact=compact,
        cancellable=cancellable,
    )
    registry.update("sample", progress=progress, phase=phase)
    click.echo(renderer.render("sample"))
    registry.dispose()


if __name__ == "__main__":
    main()
