"""Config commands -- view the effective configuration.

Provides the ``skyclient config`` sub-command group. Settings are resolved
from CLI flags, ``SKYCLIENT_*`` environment variables, the optional
``~/.skyclient/config.json`` and the selected preset (see
:func:`~skyclient.config.resolve_settings`).
"""

from __future__ import annotations

import typer

from skyclient.commands import settings_from_context
from skyclient.exceptions import SkyclientError
from skyclient.output import error, info, print_json, print_table


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective settings as JSON.

    Example::

        skyclient config show
        skyclient --preset local config show
    """
    from skyclient.config import config_file_path

    try:
        settings = settings_from_context(ctx)
    except SkyclientError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    path = config_file_path(settings.home_dir)
    if path.is_file():
        info(f"Config file: {path}")
    data = settings.model_dump(mode="json")
    data["session_path"] = str(settings.session_path)
    print_json(data)


@config_app.command("presets")
def config_presets() -> None:
    """List the built-in presets and their identity service URLs.

    Example::

        skyclient config presets
    """
    from skyclient.config import DEFAULT_PRESET, PRESETS, list_presets

    rows = []
    for name in list_presets():
        label = f"{name} (default)" if name == DEFAULT_PRESET else name
        rows.append([label, PRESETS[name]["kratos_url"]])
    print_table(["Preset", "Kratos URL"], rows, title="Presets")
