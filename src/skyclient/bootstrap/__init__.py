"""Workstation provisioning for skyclient.

See :mod:`skyclient.bootstrap.provision` for the directory layout and the
download-with-fallback behaviour, and :mod:`skyclient.bootstrap.defaults`
for the built-in configuration files.
"""

from skyclient.bootstrap.provision import (
    ConfigFile,
    FileSource,
    ProvisionedFile,
    SetupReport,
    config_files,
    create_directories,
    download_config_files,
    required_directories,
    run_setup,
)

__all__ = [
    "ConfigFile",
    "FileSource",
    "ProvisionedFile",
    "SetupReport",
    "config_files",
    "create_directories",
    "download_config_files",
    "required_directories",
    "run_setup",
]
