"""Built-in CLI sub-commands for skyclient.

This package groups the Typer sub-command modules that form the CLI's
command tree:

* :mod:`~skyclient.commands.login` -- prompt for credentials and log in.
* :mod:`~skyclient.commands.setup` -- provision directories and config files.
* :mod:`~skyclient.commands.session` -- inspect or remove the stored session.
* :mod:`~skyclient.commands.config` -- show effective settings and presets.

Single commands (``login``, ``setup``) export a plain callback registered
directly on the root app; groups (``session``, ``config``) export a
:class:`typer.Typer` sub-application.
"""

from __future__ import annotations

import typer

from skyclient.models import Settings


def settings_from_context(ctx: typer.Context) -> Settings:
    """Resolve :class:`~skyclient.models.Settings` from the root options.

    The root callback stores ``--preset`` and ``--kratos-url`` in
    ``ctx.obj``; environment variables and the config file fill in the rest.

    Raises:
        ConfigError: If the preset is unknown or the config file is invalid.
    """
    from skyclient.config import resolve_settings

    obj = ctx.obj or {}
    return resolve_settings(
        cli_preset=obj.get("preset"),
        cli_kratos_url=obj.get("kratos_url"),
    )
