"""Main CLI application using Typer."""

from __future__ import annotations

import asyncio
import base64
import mimetypes
import signal
from pathlib import Path
from typing import Annotated, Optional

import httpx
import typer

from ..core import defaults as D
from .output import (
    console,
    format_step,
    print_error,
    print_info,
    print_success,
    print_tool_table,
    print_warning,
)

app = typer.Typer(
    name="skillstream",
    help="Task/step streaming chat server and client",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

DEFAULT_URL = f"http://127.0.0.1:{D.DEFAULT_PORT}"


@app.command("serve")
def serve(
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="Interface to bind"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", "-p", help="Port to listen on"),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", "-l", help="Log level (debug/info/warning/error)"),
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", help="Path to a YAML config file"),
    ] = None,
):
    """Run the chat server.

    Examples:
        skillstream serve
        skillstream serve --port 9000 --log-level debug
    """
    import uvicorn

    from ..core.config import AppConfig, configure_logging
    from ..web.app import create_app

    config = AppConfig.load(config_file)
    # CLI flags > Environment > Config file > Defaults
    config.host = host or config.host
    config.port = port or config.port
    config.log_level = log_level or config.log_level

    configure_logging(config.log_level)
    if not config.deepseek_api_key:
        print_warning("DEEPSEEK_API_KEY is not set; chat requests will be rejected")

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


def _load_image(path: Path) -> dict:
    mime_type = mimetypes.guess_type(path.name)[0] or "image/png"
    return {
        "id": path.name,
        "base64": base64.b64encode(path.read_bytes()).decode("ascii"),
        "mimeType": mime_type,
    }


def _load_file(path: Path) -> dict:
    content = path.read_text(errors="replace")
    return {
        "id": path.name,
        "name": path.name,
        "content": content,
        "mimeType": mimetypes.guess_type(path.name)[0] or "text/plain",
        "size": len(content.encode("utf-8")),
    }


@app.command("chat")
def chat(
    message: Annotated[str, typer.Argument(help="Your message")],
    url: Annotated[str, typer.Option("--url", "-u", help="Server URL")] = DEFAULT_URL,
    image: Annotated[
        Optional[list[Path]],
        typer.Option("--image", "-i", help="Attach an image", exists=True, dir_okay=False),
    ] = None,
    file: Annotated[
        Optional[list[Path]],
        typer.Option("--file", "-f", help="Attach a text file", exists=True, dir_okay=False),
    ] = None,
    tools: Annotated[
        bool,
        typer.Option("--tools", "-t", help="Let the model call tools"),
    ] = False,
    temperature: Annotated[
        float,
        typer.Option("--temperature", help="Sampling temperature"),
    ] = D.DEFAULT_TEMPERATURE,
    system: Annotated[
        Optional[str],
        typer.Option("--system", "-s", help="System prompt"),
    ] = None,
    stream: Annotated[
        bool,
        typer.Option("--stream/--no-stream", help="Stream the answer as it is generated"),
    ] = True,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show task and step events"),
    ] = False,
):
    """Send one message and stream the answer.

    Press Ctrl+C to cancel; cancelling is not reported as an error.

    Examples:
        skillstream chat "hello"
        skillstream chat -i photo.jpg "what is in this picture?"
        skillstream chat -t "what is 17 * 23?"
        skillstream chat --no-stream "summarize this" -f notes.md
    """
    messages = [{"role": "system", "content": system}] if system else []
    messages.append({"role": "user", "content": message})
    request = {
        "messages": messages,
        "images": [_load_image(p) for p in image or []],
        "files": [_load_file(p) for p in file or []],
        "temperature": temperature,
        "enableTools": tools,
    }

    if stream:
        outcome = asyncio.run(_stream_chat(url, request, verbose))
    else:
        outcome = asyncio.run(_fetch_chat(url, request, verbose))
    if outcome == "failed":
        raise typer.Exit(1)


async def _stream_chat(url: str, request: dict, verbose: bool) -> str:
    from ..client.consumer import StreamOutcome, TaskCallbacks, TaskStreamClient

    abort = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, abort.set)

    def on_task_start(task):
        if verbose:
            print_info(f"Task {task.id} ({task.type})")

    def on_step(step):
        if verbose:
            console.print(format_step(step))

    callbacks = TaskCallbacks(
        on_task_start=on_task_start,
        on_step_start=on_step,
        on_step_complete=on_step,
        on_content=lambda text: console.print(text, end="", markup=False, highlight=False),
        on_error=lambda error: print_error(error),
        on_complete=lambda task: console.print(),
        on_tool_call=lambda step: console.print(f"\n[cyan]→ {step.description}[/cyan]"),
    )

    try:
        async with TaskStreamClient(url) as client:
            outcome = await client.send(request, callbacks, abort)
    finally:
        loop.remove_signal_handler(signal.SIGINT)

    if outcome is StreamOutcome.ABORTED:
        console.print()
        print_info("Cancelled")
    return outcome.value


async def _fetch_chat(url: str, request: dict, verbose: bool) -> str:
    from ..client.consumer import StreamOutcome, TaskStreamClient
    from ..core.models import Step, Task, TaskStatus

    try:
        async with TaskStreamClient(url) as client:
            data = await client.fetch(request)
    except httpx.HTTPError as e:
        print_error(f"Server unreachable at {url}: {e}")
        return StreamOutcome.FAILED.value

    if "error" in data:
        print_error(data["error"].get("message", "Request rejected"))
        return StreamOutcome.FAILED.value

    if verbose:
        for chunk in data["chunks"]:
            if chunk["type"] == "step" and chunk["data"]["event"] != "start":
                console.print(format_step(Step.from_dict(chunk["data"]["step"])))

    task = Task.from_dict(data["task"])
    if task.status is TaskStatus.FAILED:
        print_error(task.error or "Task failed")
        return StreamOutcome.FAILED.value
    console.print(task.result or "", markup=False, highlight=False)
    return StreamOutcome.COMPLETED.value


@app.command("health")
def health(
    url: Annotated[str, typer.Option("--url", "-u", help="Server URL")] = DEFAULT_URL,
):
    """Check server health and configured providers."""
    from ..client.consumer import TaskStreamClient

    async def _fetch() -> dict:
        async with TaskStreamClient(url) as client:
            return await client.health()

    try:
        data = asyncio.run(_fetch())
    except httpx.HTTPError as e:
        print_error(f"Server unreachable at {url}: {e}")
        raise typer.Exit(1) from None

    print_success(f"Server {data.get('status', '?')} (version {data.get('version', '?')})")
    for provider, enabled in data.get("features", {}).items():
        mark = "[green]✓[/green]" if enabled else "[red]✗[/red]"
        console.print(f"  {mark} {provider}")


@app.command("tools")
def list_tools():
    """List the built-in tools available to the model."""
    from ..tools.builtin import default_tool_registry

    print_tool_table(default_tool_registry().specs())


if __name__ == "__main__":
    app()
