"""Named context hooks for the profile and global scopes.

The registry only stores and selects hooks; running them is delegated to a
``HookExecutor``.
"""

from __future__ import annotations

from toolgate.agents.models import Hook, Trigger
from toolgate.errors import (
    HookExistsError,
    HookNameRequiredError,
    HookNotFoundError,
    InvalidHookTriggerError,
)
from toolgate.hooks.executor import HookExecutor, HookOutput
from toolgate.models import HookScope


class HookRegistry:
    def __init__(
        self,
        profile_hooks: dict[str, Hook] | None = None,
        global_hooks: dict[str, Hook] | None = None,
    ) -> None:
        self._profile = profile_hooks if profile_hooks is not None else {}
        self._global = global_hooks if global_hooks is not None else {}

    def bind_profile(self, hooks: dict[str, Hook]) -> None:
        self._profile = hooks

    def _table(self, global_: bool) -> tuple[HookScope, dict[str, Hook]]:
        if global_:
            return HookScope.GLOBAL, self._global
        return HookScope.PROFILE, self._profile

    def _require(self, name: str, global_: bool) -> Hook:
        if not name:
            raise HookNameRequiredError()
        scope, table = self._table(global_)
        hook = table.get(name)
        if hook is None:
            raise HookNotFoundError(name, scope.value)
        return hook

    def add(
        self,
        name: str,
        trigger: Trigger | str,
        command: str,
        global_: bool = False,
    ) -> Hook:
        if not name:
            raise HookNameRequiredError()
        scope, table = self._table(global_)
        if name in table:
            raise HookExistsError(name, scope.value)
        hook = Hook(trigger=_parse_trigger(trigger), command=command)
        table[name] = hook
        return hook

    def remove(self, name: str, global_: bool = False) -> Hook:
        self._require(name, global_)
        _, table = self._table(global_)
        return table.pop(name)

    def enable(self, name: str, global_: bool = False) -> None:
        self._require(name, global_).disabled = False

    def disable(self, name: str, global_: bool = False) -> None:
        self._require(name, global_).disabled = True

    def enable_all(self, global_: bool = False) -> None:
        _, table = self._table(global_)
        for hook in table.values():
            hook.disabled = False

    def disable_all(self, global_: bool = False) -> None:
        _, table = self._table(global_)
        for hook in table.values():
            hook.disabled = True

    def entries(self) -> list[tuple[HookScope, str, Hook]]:
        entries = [(HookScope.GLOBAL, name, hook) for name, hook in sorted(self._global.items())]
        entries.extend(
            (HookScope.PROFILE, name, hook) for name, hook in sorted(self._profile.items())
        )
        return entries

    def hooks_for(self, trigger: Trigger) -> list[tuple[str, Hook]]:
        return [
            (name, hook)
            for _, name, hook in self.entries()
            if hook.trigger == trigger and not hook.disabled
        ]

    async def run(self, trigger: Trigger, executor: HookExecutor) -> list[HookOutput]:
        return await executor.run(self.hooks_for(trigger))


def _parse_trigger(value: Trigger | str) -> Trigger:
    if isinstance(value, Trigger):
        return value
    try:
        return Trigger(value)
    except ValueError as exc:
        raise InvalidHookTriggerError(value) from exc
