# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Host runtime integration facade.

The driver calls `init()` before compiled output executes and `done()`
afterwards. The host supplies the real implementation; `HostRuntime` only
tracks the bracket so misuse (double init, done without init) is caught.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class Runtime(Protocol):
	def init(self) -> None:
		...

	def done(self) -> None:
		...


class HostRuntime:
	def __init__(
		self,
		on_init: Optional[Callable[[], None]] = None,
		on_done: Optional[Callable[[], None]] = None,
	) -> None:
		self._on_init = on_init
		self._on_done = on_done
		self.active = False

	def init(self) -> None:
		if self.active:
			raise RuntimeError("host runtime already initialized")
		logger.debug("initializing host runtime")
		if self._on_init is not None:
			self._on_init()
		self.active = True

	def done(self) -> None:
		if not self.active:
			raise RuntimeError("host runtime not initialized")
		logger.debug("shutting down host runtime")
		self.active = False
		if self._on_done is not None:
			self._on_done()


__all__ = ["Runtime", "HostRuntime"]
