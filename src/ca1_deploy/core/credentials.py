"""
Admin credential sources for the VM's local administrator.

The reconciler asks a CredentialSource for the password right before it
creates the VM. The CLI always uses the interactive prompt.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import click

from ca1_deploy.core.exceptions import CredentialError

ADMIN_PASSWORD_ENV = "CA1_ADMIN_PASSWORD"


@dataclass(frozen=True)
class AdminLogin:
    """Username/password pair used as the VM's login credential."""

    username: str
    password: str = field(repr=False)

    def __repr__(self) -> str:
        return f"AdminLogin(username={self.username!r}, password='****')"


class CredentialSource(ABC):
    """Where the admin password comes from."""

    @abstractmethod
    def get_password(self, username: str) -> str:
        ...

    def login_for(self, username: str) -> AdminLogin:
        return AdminLogin(username=username, password=self.get_password(username))


class PromptCredentialSource(CredentialSource):
    """Masked interactive prompt."""

    def get_password(self, username: str) -> str:
        return click.prompt(f"Password for VM admin '{username}'", hide_input=True)


class StaticCredentialSource(CredentialSource):
    def __init__(self, password: str) -> None:
        self._password = password

    def get_password(self, username: str) -> str:
        return self._password


class EnvironmentCredentialSource(CredentialSource):
    """Reads the password from an environment variable."""

    def __init__(self, variable: str = ADMIN_PASSWORD_ENV) -> None:
        self.variable = variable

    def get_password(self, username: str) -> str:
        password = os.environ.get(self.variable)
        if not password:
            raise CredentialError(
                f"Environment variable {self.variable} is not set",
                hint=f"export {self.variable}=<password for {username}>",
            )
        return password
