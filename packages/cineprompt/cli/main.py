"""Command-line interface for CinePrompt."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from cineprompt.core.config.loader import load_app_config
from cineprompt.core.config.models import AppConfig
from cineprompt.core.config.settings import JsonSettingsStore, StaticSettingsProvider
from cineprompt.core.errors import ConfigurationError
from cineprompt.core.generation.service import PromptGenerationService
from cineprompt.core.prompting.models import (
    CameraDirection,
    CameraStyle,
    GeminiModel,
    GenerationOutcome,
    GenerationParameters,
    LabeledChoice,
    Pacing,
    PromptLength,
    SpecialEffect,
    VisualStyle,
)
from cineprompt.core.prompting.template import find_placeholders
from cineprompt.core.utils.logging import configure_logging

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

CHOICE_GROUPS: dict[str, type[LabeledChoice]] = {
    "model": GeminiModel,
    "style": VisualStyle,
    "camera-style": CameraStyle,
    "camera-direction": CameraDirection,
    "pacing": Pacing,
    "effects": SpecialEffect,
    "length": PromptLength,
}


def _settings_store(config: AppConfig) -> JsonSettingsStore:
    return JsonSettingsStore(config.resolved_settings_path(), fallback_api_key=config.api.api_key)


def _load_config(args: argparse.Namespace) -> AppConfig:
    config = load_app_config(Path(args.app_config) if args.app_config else None)
    level = "DEBUG" if args.verbose else config.logging.level
    configure_logging(
        level=level,
        format_string=config.logging.format,
        filename=config.logging.filename,
        structured=config.logging.structured,
    )
    return config


def _parameters_from_args(args: argparse.Namespace) -> GenerationParameters:
    return GenerationParameters(
        concept=args.concept,
        model=args.model,
        style=args.style,
        camera_style=args.camera_style,
        camera_direction=args.camera_direction,
        pacing=args.pacing,
        special_effects=args.effects,
        custom_elements=args.custom,
        prompt_length=args.length,
        cfg_scale=args.cfg_scale,
    )


def _print_outcome(outcome: GenerationOutcome, as_json: bool) -> int:
    if as_json:
        console.print_json(outcome.model_dump_json())
        return 0 if outcome.succeeded else 1

    if not outcome.succeeded:
        err_console.print(f"[red]Generation Error:[/red] {outcome.error}")
        return 1

    if outcome.attempts > 1:
        err_console.print(
            f"[green]Video prompt generated successfully after {outcome.attempts} attempts![/green]"
        )
    else:
        err_console.print("[green]Video prompt generated successfully![/green]")
    console.print(outcome.prompt, highlight=False, soft_wrap=True)
    return 0


def run_generate(args: argparse.Namespace) -> int:
    """Generate a video prompt from command-line parameters."""
    config = _load_config(args)
    store = _settings_store(config)
    settings = store.load()

    overrides: dict[str, object] = {}
    if args.template:
        template_path = Path(args.template)
        if not template_path.exists():
            err_console.print(f"[red]ERROR: Template not found: {template_path}[/red]")
            return 1
        overrides["prompt_template"] = template_path.read_text(encoding="utf-8")
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries
    if overrides:
        try:
            settings = settings.model_validate({**settings.model_dump(), **overrides})
        except ValidationError as e:
            err_console.print(f"[red]ERROR: {e.errors()[0]['msg']}[/red]")
            return 1

    if "concept" not in find_placeholders(settings.prompt_template):
        err_console.print("[yellow]Warning: prompt template has no {concept} placeholder[/yellow]")

    service = PromptGenerationService(
        StaticSettingsProvider(settings), config.generation, api=config.api
    )
    images = [Path(p) for p in args.image or []]
    if len(images) > config.generation.image_limit:
        err_console.print(
            f"[yellow]Only the first {config.generation.image_limit} images will be used[/yellow]"
        )

    outcome = asyncio.run(service.generate(_parameters_from_args(args), images))
    return _print_outcome(outcome, args.json)


def run_options(args: argparse.Namespace) -> int:
    """Print the available choices for each parameter."""
    groups = [args.group] if args.group else list(CHOICE_GROUPS)
    for group in groups:
        table = Table(title=group)
        table.add_column("Value", style="cyan")
        table.add_column("Label")
        for value, label in CHOICE_GROUPS[group].choices():
            table.add_row(value, label)
        console.print(table)
    return 0


def run_settings(args: argparse.Namespace) -> int:
    """Inspect or change stored user settings."""
    config = _load_config(args)
    store = _settings_store(config)

    try:
        if args.action == "show":
            settings = store.load()
            console.print(f"Settings file: {store.path}")
            console.print(f"API key: {'set' if settings.has_api_key else '[red]not set[/red]'}")
            console.print(f"Max retries: {settings.max_retries}")
            console.print(f"Prompt template: {len(settings.prompt_template)} characters")
        elif args.action == "set-key":
            store.set_api_key(args.value)
            console.print("[green]API key saved[/green]")
        elif args.action == "delete-key":
            store.delete_api_key()
            console.print("API key deleted")
        elif args.action == "set-retries":
            store.set_max_retries(int(args.value))
            console.print(f"Max retries set to {args.value}")
        elif args.action == "set-template":
            store.set_prompt_template(Path(args.value).read_text(encoding="utf-8"))
            console.print("Prompt template updated")
        elif args.action == "reset-template":
            store.reset_prompt_template()
            console.print("Prompt template reset to default")
        elif args.action == "clear":
            store.clear()
            console.print("All settings cleared")
    except (ConfigurationError, ValueError, OSError) as e:
        err_console.print(f"[red]ERROR: {e}[/red]")
        return 1
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--app-config", default=None, help="Path to app config (JSON or YAML)")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="cineprompt",
        description="CinePrompt - create detailed video prompts, optionally with image references",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate a video prompt")
    _add_common(gen)
    gen.add_argument("--concept", required=True, help="Scene concept, e.g. 'A futuristic city at dusk'")
    gen.add_argument("--model", default=GeminiModel.GEMINI_2_5_FLASH.value)
    gen.add_argument("--style", default=VisualStyle.DEFAULT.value)
    gen.add_argument("--camera-style", default=CameraStyle.DEFAULT.value)
    gen.add_argument("--camera-direction", default=CameraDirection.DEFAULT.value)
    gen.add_argument("--pacing", default=Pacing.DEFAULT.value)
    gen.add_argument("--effects", default=SpecialEffect.DEFAULT.value, help="Special effects")
    gen.add_argument("--custom", default=None, help="Custom elements to weave in")
    gen.add_argument("--length", default=PromptLength.MEDIUM.value, help="Desired prompt length")
    gen.add_argument("--cfg-scale", type=float, default=0.7, help="Adherence to the concept")
    gen.add_argument(
        "--image", action="append", help="Reference image (repeatable, max 10)", metavar="PATH"
    )
    gen.add_argument("--template", default=None, help="Prompt template file for this run")
    gen.add_argument("--max-retries", type=int, default=None, help="Attempt budget (1-10)")
    gen.add_argument("--json", action="store_true", help="Print the outcome as JSON")

    opts = sub.add_parser("options", help="List parameter choices")
    opts.add_argument("group", nargs="?", choices=list(CHOICE_GROUPS))

    st = sub.add_parser("settings", help="Manage stored settings")
    _add_common(st)
    st.add_argument(
        "action",
        choices=[
            "show",
            "set-key",
            "delete-key",
            "set-retries",
            "set-template",
            "reset-template",
            "clear",
        ],
    )
    st.add_argument("value", nargs="?", help="Value for set-key, set-retries or set-template")

    return p


def main(argv: list[str] | None = None) -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    if args.cmd == "settings" and args.action.startswith("set-") and args.value is None:
        p.error(f"settings {args.action} requires a value")

    if args.cmd == "generate":
        sys.exit(run_generate(args))
    elif args.cmd == "options":
        sys.exit(run_options(args))
    elif args.cmd == "settings":
        sys.exit(run_settings(args))


if __name__ == "__main__":
    main()
