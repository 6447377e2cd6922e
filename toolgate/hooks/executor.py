"""Concurrent execution of context hooks as shell subprocesses."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from toolgate.agents.models import Hook, Trigger
from toolgate.constants import (
    DEFAULT_HOOK_TIMEOUT_SECONDS,
    DEFAULT_HOOKS_TOTAL_TIMEOUT_SECONDS,
    HOOK_OUTPUT_MAX_CHARS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HookOutput:
    name: str
    trigger: Trigger
    output: str


class HookExecutor(ABC):
    @abstractmethod
    async def run(self, hooks: list[tuple[str, Hook]]) -> list[HookOutput]:
        raise NotImplementedError


class SubprocessHookExecutor(HookExecutor):
    """Runs hooks in parallel under per-hook and whole-batch timeouts.

    Hooks that fail, time out, or are still running when the batch deadline
    passes contribute no output. Conversation-start hooks run once per
    executor; later batches reuse their first output.
    """

    def __init__(
        self,
        cwd: Path | None = None,
        hook_timeout: float = DEFAULT_HOOK_TIMEOUT_SECONDS,
        total_timeout: float = DEFAULT_HOOKS_TOTAL_TIMEOUT_SECONDS,
        max_output_chars: int = HOOK_OUTPUT_MAX_CHARS,
    ) -> None:
        self.cwd = cwd
        self.hook_timeout = hook_timeout
        self.total_timeout = total_timeout
        self.max_output_chars = max_output_chars
        self._start_cache: dict[str, HookOutput] = {}

    async def run(self, hooks: list[tuple[str, Hook]]) -> list[HookOutput]:
        cached: list[HookOutput] = []
        to_run: list[tuple[str, Hook]] = []
        for name, hook in hooks:
            if hook.trigger == Trigger.CONVERSATION_START and name in self._start_cache:
                cached.append(self._start_cache[name])
            else:
                to_run.append((name, hook))
        if not to_run:
            return cached

        tasks = [asyncio.create_task(self._run_one(name, hook)) for name, hook in to_run]
        done, pending = await asyncio.wait(tasks, timeout=self.total_timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning("%d hook(s) cancelled after %.1fs", len(pending), self.total_timeout)

        outputs = list(cached)
        for task in tasks:
            if task not in done or task.cancelled() or task.exception() is not None:
                continue
            result = task.result()
            if result is None:
                continue
            if result.trigger == Trigger.CONVERSATION_START:
                self._start_cache[result.name] = result
            outputs.append(result)
        return outputs

    async def _run_one(self, name: str, hook: Hook) -> HookOutput | None:
        try:
            process = await asyncio.create_subprocess_shell(
                hook.command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self.cwd) if self.cwd is not None else None,
            )
        except OSError as exc:
            logger.error("Hook %s failed to start: %s", name, exc)
            return None

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), self.hook_timeout)
        except asyncio.TimeoutError:
            await _kill(process)
            logger.warning("Hook %s timed out after %.1fs", name, self.hook_timeout)
            return None
        except asyncio.CancelledError:
            await _kill(process)
            raise

        if process.returncode != 0:
            logger.warning(
                "Hook %s exited with %s: %s",
                name,
                process.returncode,
                stderr.decode("utf-8", errors="replace").strip(),
            )
            return None

        output = stdout.decode("utf-8", errors="replace")
        if len(output) > self.max_output_chars:
            output = output[: self.max_output_chars]
        return HookOutput(name=name, trigger=hook.trigger, output=output)


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()


def format_hook_outputs(outputs: list[HookOutput]) -> str:
    if not outputs:
        return ""
    blocks = [f"'{item.name}': {item.output.rstrip()}" for item in outputs]
    return "--- CONTEXT HOOKS BEGIN ---\n" + "\n\n".join(blocks) + "\n--- CONTEXT HOOKS END ---"
