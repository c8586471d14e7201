"""Abstract base stage with enforced lifecycle.

Every concrete stage inherits from BaseStage and implements only
``execute()``.  The ``run_stage()`` wrapper is **not overridable** — it
enforces the canonical lifecycle ordering:

    compute_input_hash -> execute -> record -> tag outcome

and turns both returned results and raised exceptions into a
``StageOutcome`` (Ok, Warn or Fatal), so the tolerated-versus-fatal policy
lives in one place.

Result conventions for ``execute()``:
    ``_warnings`` — list of recoverable discrepancies (outcome WARN).
    ``_fatal``    — reason string; the stage failed without raising.
Keys starting with ``_`` are stripped from the outcome details.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, final

from wrtforge.core.hasher import compute_input_hash
from wrtforge.models.outcomes import StageOutcome

logger = logging.getLogger(__name__)


class BaseStage(abc.ABC):
    """Abstract base for all wrtforge pipeline stages.

    Subclasses **must** implement:
        * ``stage_id``     — identifier matching a ``StageDefinition``.
        * ``display_name`` — human-readable name for the run report.
        * ``execute(run_context)`` — the stage's core logic.

    Subclasses **may** override:
        * ``should_run(run_context)`` — return ``False`` to skip the stage.
        * ``inputs(run_context)`` — values fingerprinted into the input hash.

    Subclasses **must not** override ``run_stage()``.
    """

    @property
    @abc.abstractmethod
    def stage_id(self) -> str:
        ...

    @property
    @abc.abstractmethod
    def display_name(self) -> str:
        ...

    @abc.abstractmethod
    def execute(self, run_context: dict[str, Any]) -> dict[str, Any]:
        """Execute the stage's core logic.

        Parameters
        ----------
        run_context:
            Mutable dict carrying run-wide state: ``run_id``, ``settings``,
            prior stage results and the values they published.

        Returns
        -------
        dict:
            Structured result dict appropriate to the stage's purpose.
        """
        ...

    def should_run(self, run_context: dict[str, Any]) -> bool:
        return True

    def inputs(self, run_context: dict[str, Any]) -> dict[str, Any]:
        return {}

    # ------------------------------------------------------------------
    # Lifecycle, NOT overridable
    # ------------------------------------------------------------------

    @final
    def run_stage(self, run_context: dict[str, Any]) -> StageOutcome:
        """Execute the full stage lifecycle.  **Do not override.**"""
        input_hash = ""
        try:
            input_hash = compute_input_hash(self.stage_id, self.inputs(run_context))
            logger.info(
                "%s [%s] input_hash=%s", self.display_name, self.stage_id, input_hash[:12]
            )
            result = self.execute(run_context)
        except Exception as exc:
            logger.error("%s [%s] failed: %s", self.display_name, self.stage_id, exc)
            return StageOutcome.fatal(
                self.stage_id,
                f"{type(exc).__name__}: {exc}",
                input_hash=input_hash,
            )

        run_context.setdefault("stage_results", {})[self.stage_id] = result
        details = {k: v for k, v in result.items() if not k.startswith("_")}
        warnings: list[str] = list(result.get("_warnings", []))
        fatal: str | None = result.get("_fatal")

        if fatal:
            logger.error("%s [%s] failed: %s", self.display_name, self.stage_id, fatal)
            return StageOutcome.fatal(
                self.stage_id, fatal, warnings=warnings, input_hash=input_hash, details=details
            )
        if warnings:
            logger.warning(
                "%s [%s] completed with %d warning(s)",
                self.display_name,
                self.stage_id,
                len(warnings),
            )
            return StageOutcome.warn(
                self.stage_id, warnings, input_hash=input_hash, details=details
            )
        logger.info("%s [%s] completed", self.display_name, self.stage_id)
        return StageOutcome.ok(self.stage_id, input_hash=input_hash, details=details)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} stage_id={self.stage_id!r}>"
