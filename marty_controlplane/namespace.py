"""
Local username and namespace helpers.

Local clusters are namespaced by the user that created them. Under sudo the
namespace follows the invoking user, not root.
"""

import os
import pwd
from collections.abc import Callable
from typing import Optional

from .exceptions import ControlPlaneError, UsernameNotFoundError

UsernameFunc = Callable[[], str]


def resolve_sudo(username: str, getenv: Callable[[str], Optional[str]] = os.getenv) -> str:
    """Return the original username if sudo was used."""
    if username != "root":
        return username
    return getenv("SUDO_USER") or username


def env_username() -> str:
    """Return the username from the environment, or an empty string."""
    return os.getenv("USER", "")


def os_username() -> str:
    """Return the username of the current uid."""
    return pwd.getpwuid(os.getuid()).pw_name


def resolve_username(
    resolve_sudo: Optional[Callable[[str], str]], *username_funcs: UsernameFunc
) -> str:
    """Return the first username produced by ``username_funcs``.

    The functions are tried in order and their errors propagate. An empty
    result means "not found here" and the next function is tried. The
    found name is passed through ``resolve_sudo`` when one is given.
    """
    for username_func in username_funcs:
        username = username_func()
        if not username:
            continue
        if resolve_sudo is not None:
            original = resolve_sudo(username)
            if original:
                username = original
        return username
    raise UsernameNotFoundError()


def namespace(username: str, env_name: str) -> str:
    return f"{username}-{env_name}"


def local_username() -> str:
    """Determine the current username on the local host."""
    try:
        return resolve_username(resolve_sudo, env_username, os_username)
    except (KeyError, ControlPlaneError) as e:
        raise ControlPlaneError(
            f"cannot get current user from the environment: {e}"
        ) from e


def local_namespace(env_name: str) -> str:
    """Namespace for ``env_name`` based on the current local user."""
    try:
        username = local_username()
    except ControlPlaneError as e:
        raise ControlPlaneError(
            f"failed to determine username for namespace: {e}"
        ) from e
    return namespace(username, env_name)
