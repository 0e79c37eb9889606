"""Wrappers around macOS identity lookups and local command execution."""

from macdeploy.system.identity import console_user, local_hostname, run, user_home

__all__ = ["console_user", "local_hostname", "run", "user_home"]
