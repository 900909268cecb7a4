"""Canonical Pydantic models shared across all skyclient modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration** -- :class:`Settings`, resolved once at startup by
:func:`~skyclient.config.resolve_settings` and handed to every component
that needs a URL, a path or a timeout.

**Login flow records** -- produced and consumed by the authentication core:
    :class:`LoginFlow`, :class:`Credentials`, :class:`UIMessage`,
    :class:`LoginResult`, and the durable :class:`SessionRecord`.

All models use Pydantic v2.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


# --- Configuration ---


class Settings(BaseModel):
    """Effective configuration for one ``skyclient`` invocation.

    Built from a named preset and layered overrides (config file,
    environment, CLI flags). See :func:`~skyclient.config.resolve_settings`
    for the precedence chain.
    """

    model_config = ConfigDict(extra="forbid")

    preset: str = Field(default="default", description="Name of the base preset")
    kratos_url: str = Field(description="Public base URL of the Kratos identity service")
    home_dir: Path = Field(description="Skyclient state directory (~/.skyclient)")
    workspace_dir: Path = Field(description="Operator workspace directory (~/autrikos)")
    token_file: Optional[Path] = Field(
        default=None,
        description="Session file; defaults to <home_dir>/token",
    )
    tokenize_template: str = Field(
        default="jwks_template_7days",
        description="Kratos tokenizer template used for the bearer token",
    )
    timeout: float = Field(default=30.0, description="Per-request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    filebrowser_config_url: str = Field(description="Source of filebrowser settings.json")
    docker_compose_url: str = Field(description="Source of docker-compose.yaml")
    mavlink_router_config_url: str = Field(description="Source of mavlink-router.conf")

    @field_validator("kratos_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("kratos_url must not be empty")
        return value

    @field_validator("home_dir", "workspace_dir", "token_file")
    @classmethod
    def _expand_user(cls, value: Optional[Path]) -> Optional[Path]:
        return value.expanduser() if value is not None else None

    @property
    def session_path(self) -> Path:
        """Where the session record is written."""
        return self.token_file or self.home_dir / "token"


# --- Login flow ---


class LoginFlow(BaseModel):
    """A provider-issued login flow, reduced to the one field the client needs.

    ``submission_url`` is the flow's ``ui.action``. It embeds the flow id as
    a query parameter and must be used verbatim.
    """

    submission_url: str


class Credentials(BaseModel):
    """Operator-supplied identifier and password.

    Held in memory only. The secret is wrapped in :class:`~pydantic.SecretStr`
    so it never shows up in ``repr`` output or logs.
    """

    identifier: str
    secret: SecretStr

    @field_validator("identifier")
    @classmethod
    def _identifier_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("identifier must not be empty")
        return value

    @field_validator("secret")
    @classmethod
    def _secret_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("secret must not be empty")
        return value


class UIMessage(BaseModel):
    """One entry of a Kratos flow's ``ui.messages`` array."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: str = Field(default="", alias="type")
    text: str = ""


class LoginResult(BaseModel):
    """Outcome of a successful credential submission."""

    session_token: str
    user_id: str
    workspace_id: str = ""
    ui_messages: list[UIMessage] = Field(default_factory=list)


class SessionRecord(BaseModel):
    """The durable session artifact written to ``~/.skyclient/token``.

    Field order is the on-disk key order. Optional values are empty strings,
    never ``null``, so consumers can read every key unconditionally.
    """

    token: str
    user_id: str
    workspace_id: str = ""
    jwt_token: str = ""
    email: str

    @classmethod
    def from_login(
        cls,
        result: LoginResult,
        email: str,
        jwt_token: str = "",
    ) -> SessionRecord:
        """Assemble a record from a login result and the exchanged bearer token.

        Args:
            result: The successful login result.
            email: Identifier the operator logged in with.
            jwt_token: Bearer token from the token exchange, or ``""``.

        Returns:
            A new :class:`SessionRecord`.
        """
        return cls(
            token=result.session_token,
            user_id=result.user_id,
            workspace_id=result.workspace_id or "",
            jwt_token=jwt_token or "",
            email=email,
        )
