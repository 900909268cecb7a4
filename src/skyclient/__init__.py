"""skyclient -- bootstrap a Skyclient workstation and log in to the identity service.

The package does two jobs:

* **Provisioning** -- creates the ``~/.skyclient`` directory tree and the
  ``~/autrikos`` workspace, then downloads the filebrowser, docker-compose and
  mavlink-router configuration files, writing built-in defaults when a
  download fails.
* **Login** -- runs the Kratos email/password flow and stores the resulting
  session token, user id, workspace id and bearer (JWT) token in
  ``~/.skyclient/token`` so that other tools can reuse it.

Typical workflow::

    skyclient --setup          # provision, then log in
    skyclient login            # log in only
    skyclient session show     # inspect the stored session

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: Settings presets, precedence resolution and atomic writes.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.3.0"
