"""Context file lists for the active profile and the global scope."""

from __future__ import annotations

import glob
import logging
from pathlib import Path

from toolgate.agents.models import Context
from toolgate.agents.parser import encode_context
from toolgate.errors import ContextPathError
from toolgate.models import HookScope
from toolgate.utils import expand_path, write_json

logger = logging.getLogger(__name__)


class ContextManager:
    def __init__(
        self,
        profile_context: Context,
        global_context: Context,
        cwd: Path | None = None,
        home: Path | None = None,
    ) -> None:
        self.profile_context = profile_context
        self.global_context = global_context
        self.cwd = cwd or Path.cwd()
        self.home = home

    def bind_profile(self, context: Context) -> None:
        self.profile_context = context

    def _target(self, global_: bool) -> tuple[HookScope, Context]:
        if global_:
            return HookScope.GLOBAL, self.global_context
        return HookScope.PROFILE, self.profile_context

    def add_paths(self, paths: list[str], global_: bool = False, force: bool = False) -> None:
        if not paths:
            raise ContextPathError("No paths specified")
        scope, context = self._target(global_)

        if not force:
            invalid = [path for path in paths if not self._expand(path)]
            if invalid:
                raise ContextPathError(
                    f"Invalid path(s): {', '.join(invalid)}. Use --force to add anyway."
                )

        for path in paths:
            if path in context.files:
                raise ContextPathError(f"Rule '{path}' already exists in {scope.value} context")

        context.files.extend(paths)
        logger.debug("Added %d path(s) to %s context", len(paths), scope.value)

    def remove_paths(self, paths: list[str], global_: bool = False) -> int:
        if not paths:
            raise ContextPathError("No paths specified")
        scope, context = self._target(global_)

        remaining = [item for item in context.files if item not in paths]
        removed = len(context.files) - len(remaining)
        if removed == 0:
            raise ContextPathError(
                f"None of the specified paths were found in the {scope.value} context"
            )
        context.files[:] = remaining
        return removed

    def clear(self, global_: bool = False) -> None:
        _, context = self._target(global_)
        context.files.clear()

    def scoped_files(self) -> list[tuple[str, list[str]]]:
        return [
            (HookScope.GLOBAL.value, list(self.global_context.files)),
            (HookScope.PROFILE.value, list(self.profile_context.files)),
        ]

    def matched_files(self) -> list[Path]:
        """Existing files matched by both scopes, global first, without duplicates."""
        seen: set[Path] = set()
        matched: list[Path] = []
        for item in [*self.global_context.files, *self.profile_context.files]:
            for path in self._expand(item):
                if path not in seen:
                    seen.add(path)
                    matched.append(path)
        return matched

    def save_global(self, path: Path) -> None:
        write_json(path, encode_context(self.global_context))

    def _expand(self, pattern: str) -> list[Path]:
        base = expand_path(pattern, self.cwd, self.home)
        return sorted(
            Path(item)
            for item in glob.glob(str(base), recursive=True)
            if Path(item).is_file()
        )
