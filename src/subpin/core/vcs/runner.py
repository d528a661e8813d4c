"""
Best-effort step runner.

A step is a zero-argument coroutine function returning a ProcessResult
(usually a functools.partial over a GitGateway method). The runner awaits
steps one at a time, relays their output, logs failures and always moves on
to the next step. Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from rich.console import Console
from rich.markup import escape

from subpin.core.vcs.process import ProcessResult

logger = logging.getLogger(__name__)

Step = Callable[[], Awaitable[ProcessResult]]


class StepRunner:
    """
    Runs steps sequentially and records every result.

    Output of each step is relayed verbatim: stdout to `console`, stderr to
    `err_console`. A failed step's diagnostic goes to `err_console` too.

    Example:
        >>> runner = StepRunner()
        >>> await runner.run(partial(gateway.submodule_deinit, "lib/core"))
        >>> if runner.failures:
        ...     print(f"{len(runner.failures)} step(s) failed")
    """

    def __init__(
        self,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.results: list[ProcessResult] = []

    @property
    def failures(self) -> list[ProcessResult]:
        """Results of steps that failed or were skipped."""
        return [r for r in self.results if not r.success]

    async def run(self, step: Step, *, quiet: bool = False) -> ProcessResult:
        """
        Await a single step, report it, and return its result.

        With `quiet`, output of a successful step is not relayed (used for
        inspection commands whose stdout is parsed, not shown).
        """
        result = await step()
        self.report(result, quiet=quiet)
        return result

    async def run_chain(self, *steps: Step) -> list[ProcessResult]:
        """
        Run steps where each one only makes sense if the previous succeeded.

        After the first failure the remaining steps are recorded as skipped
        rather than attempted.
        """
        results: list[ProcessResult] = []
        failed: ProcessResult | None = None
        for step in steps:
            if failed is not None:
                result = ProcessResult.skip(
                    [], f"Skipped because an earlier step failed: {' '.join(failed.command)}"
                )
                self.report(result)
            else:
                result = await self.run(step)
                if not result.success:
                    failed = result
            results.append(result)
        return results

    def report(self, result: ProcessResult, *, quiet: bool = False) -> None:
        """Record a result and relay its output."""
        self.results.append(result)

        if quiet and result.success:
            return

        if result.stdout:
            self.console.out(result.stdout.rstrip("\n"), highlight=False)

        if result.success:
            # git writes progress and hints to stderr even on success
            if result.stderr:
                self.err_console.out(result.stderr.rstrip("\n"), highlight=False)
            return

        if result.skipped:
            logger.debug("%s", result.message)
            self.err_console.print(f"[dim]{escape(result.message)}[/dim]", highlight=False)
            return

        logger.debug(
            "Step failed (exit %s): %s", result.exit_code, " ".join(result.command)
        )
        self.err_console.out(result.message, highlight=False)

    def note(self, message: str) -> None:
        """Print a progress message of subpin's own."""
        self.console.out(message, highlight=False)
