"""Sequential provisioning steps with abort-on-first-failure semantics.

A pipeline is an ordered list of named steps. Each enabled step runs inside a
tracing span; the first failing step stops the run and nothing after it is
attempted.
"""

from dataclasses import dataclass, field
from typing import Callable

from .exceptions import AwsVpcCdkError, ProvisioningError
from .logger import get_logger
from .tracing import get_tracer

logger = get_logger(__name__)
tracer = get_tracer(__name__)


@dataclass(frozen=True)
class Step:
    """A named provisioning action."""

    name: str
    action: Callable[[], object]
    enabled: bool = True


@dataclass(frozen=True)
class PipelineResult:
    completed: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()


@dataclass
class ProvisioningPipeline:
    """Runs steps in order and stops at the first failure.

    Project errors (:class:`AwsVpcCdkError` subclasses) propagate unchanged so
    callers can still tell a capacity problem from a bad address. Anything
    else is wrapped in :class:`ProvisioningError` naming the failed step.
    """

    name: str
    steps: list[Step] = field(default_factory=list)

    def add(self, name: str, action: Callable[[], object], enabled: bool = True) -> "ProvisioningPipeline":
        self.steps.append(Step(name, action, enabled))
        return self

    def run(self) -> PipelineResult:
        names = [step.name for step in self.steps]
        if len(set(names)) != len(names):
            raise ProvisioningError("Duplicate step names", pipeline=self.name, steps=names)

        log = logger.bind(pipeline=self.name)
        completed: list[str] = []
        skipped: list[str] = []

        for step in self.steps:
            if not step.enabled:
                log.debug("step_skipped", step=step.name)
                skipped.append(step.name)
                continue

            with tracer.start_as_current_span(f"{self.name}.{step.name}") as span:
                span.set_attribute("pipeline.name", self.name)
                span.set_attribute("pipeline.step", step.name)
                log.debug("step_started", step=step.name)
                try:
                    step.action()
                except AwsVpcCdkError as e:
                    log.error(
                        "step_failed",
                        step=step.name,
                        error=str(e),
                        error_type=type(e).__name__,
                        completed=completed,
                    )
                    raise
                except Exception as e:
                    log.error(
                        "step_failed",
                        step=step.name,
                        error=str(e),
                        error_type=type(e).__name__,
                        completed=completed,
                    )
                    raise ProvisioningError(
                        f"Step '{step.name}' failed: {e}",
                        pipeline=self.name,
                        step=step.name,
                        completed=",".join(completed) or "-",
                    ) from e
                completed.append(step.name)

        log.info("pipeline_completed", completed=len(completed), skipped=skipped)
        return PipelineResult(completed=tuple(completed), skipped=tuple(skipped))


__all__ = ["PipelineResult", "ProvisioningPipeline", "Step"]
