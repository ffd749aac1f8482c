"""KaliTiri host package: wraps the room registry with networking."""

from .server import HostServer

__all__ = ["HostServer"]
