"""Type aliases using modern PEP 695 syntax.

This module defines the callable shapes exchanged between the failover core
and its caller-supplied collaborators.
"""

from collections.abc import Awaitable, Callable, Hashable

from env_failover.types.models import EnvironmentConfig

# Environment identifier
# Any hashable value; the built-in Environment enum is the usual choice
type EnvironmentId = Hashable

# Probe transport
# Given one environment's configuration, report whether it is reachable
type ProbeTransport = Callable[[EnvironmentConfig], Awaitable[bool]]

# Environment change listener
# Called with the newly active environment; may return an awaitable, which is
# scheduled without being awaited
type EnvironmentListener = Callable[[EnvironmentId], object]

# Fallback operation
# Unit of work run against one environment configuration
type Operation[T] = Callable[[EnvironmentConfig], Awaitable[T]]
