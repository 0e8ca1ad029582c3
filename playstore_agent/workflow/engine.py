"""
Sequential workflow engine.
What it does:
- Runs named steps strictly in declared order
- Validates each step's output against its declared model
- Binds each output to a typed field of the run context for later steps
- Stops the whole run on the first step exception (Failed)
- Reports state transitions and step outputs to an optional listener

And, the main purpose:
Drive multi-step batch jobs with a typed, read-only context between steps.
"""


import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Optional, Protocol, TypeVar

from pydantic import BaseModel

from playstore_agent.core.ids import new_id
from playstore_agent.core.logging import get_logger

log = get_logger("workflow.engine")


class WorkflowState(str, Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    FORMATTING = "formatting"
    STORING = "storing"
    COMPLETED = "completed"
    FAILED = "failed"


CtxT = TypeVar("CtxT", bound=BaseModel)


class WorkflowDefinitionError(ValueError):
    pass


class WorkflowStepError(RuntimeError):
    def __init__(self, step_id: str, cause: BaseException):
        super().__init__(f"Step '{step_id}' failed: {cause}")
        self.step_id = step_id
        self.cause = cause


class RunListener(Protocol):
    async def transition(self, run_id: str, state: str, step_id: str, payload: dict[str, Any]) -> None: ...

    async def step_output(self, run_id: str, step_id: str, output: dict) -> None: ...


@dataclass(frozen=True)
class Step(Generic[CtxT]):
    id: str
    state: WorkflowState  # state the run is in while this step executes
    field: str  # context field that receives the output
    output_model: type[BaseModel]
    execute: Callable[[CtxT], Awaitable[Any]]


@dataclass
class WorkflowResult(Generic[CtxT]):
    run_id: str
    state: WorkflowState
    context: CtxT
    error: Optional[str] = None
    failed_step: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state == WorkflowState.COMPLETED

    def raise_for_state(self) -> None:
        if self.state == WorkflowState.FAILED:
            raise WorkflowStepError(self.failed_step or "", RuntimeError(self.error or "unknown error"))


def _accepts(annotation: Any, model: type) -> bool:
    if annotation is model:
        return True
    return model in typing.get_args(annotation)


class Workflow(Generic[CtxT]):
    def __init__(self, id: str, context_model: type[CtxT], steps: list[Step[CtxT]]):
        if not steps:
            raise WorkflowDefinitionError(f"Workflow '{id}' has no steps")

        seen: set[str] = set()
        fields = context_model.model_fields
        for step in steps:
            if step.id in seen:
                raise WorkflowDefinitionError(f"Duplicate step id '{step.id}' in workflow '{id}'")
            seen.add(step.id)
            if step.field not in fields:
                raise WorkflowDefinitionError(
                    f"Step '{step.id}' binds to unknown context field '{step.field}' "
                    f"of {context_model.__name__}"
                )
            if not _accepts(fields[step.field].annotation, step.output_model):
                raise WorkflowDefinitionError(
                    f"Context field '{step.field}' cannot hold {step.output_model.__name__} "
                    f"(step '{step.id}')"
                )

        self.id = id
        self.context_model = context_model
        self.steps = list(steps)

    @property
    def step_ids(self) -> list[str]:
        return [s.id for s in self.steps]

    async def _notify(
        self,
        listener: Optional[RunListener],
        run_id: str,
        state: WorkflowState,
        step_id: str,
        payload: dict[str, Any],
    ) -> None:
        if listener is None:
            return
        try:
            await listener.transition(run_id, state.value, step_id, payload)
        except Exception as e:
            log.warning(f"[{self.id}:{run_id}] listener failed on '{state.value}': {e}")

    async def _record_output(self, listener: Optional[RunListener], run_id: str, step_id: str, output: BaseModel):
        if listener is None:
            return
        try:
            await listener.step_output(run_id, step_id, output.model_dump(mode="json", by_alias=True))
        except Exception as e:
            log.warning(f"[{self.id}:{run_id}] listener failed recording '{step_id}' output: {e}")

    async def run(
        self,
        context: CtxT,
        *,
        run_id: Optional[str] = None,
        listener: Optional[RunListener] = None,
    ) -> WorkflowResult[CtxT]:
        run_id = run_id or new_id("run")
        log.info(f"[{self.id}:{run_id}] started ({len(self.steps)} steps)")
        await self._notify(
            listener,
            run_id,
            WorkflowState.PENDING,
            "",
            {"workflowId": self.id, "context": context.model_dump(mode="json", by_alias=True)},
        )

        for step in self.steps:
            log.info(f"[{self.id}:{run_id}] {step.state.value} ({step.id})")
            await self._notify(listener, run_id, step.state, step.id, {})
            try:
                raw = await step.execute(context)
                output = step.output_model.model_validate(raw)
            except Exception as e:
                message = str(e) or e.__class__.__name__
                log.error(f"[{self.id}:{run_id}] step '{step.id}' failed: {message}", exc_info=True)
                await self._notify(listener, run_id, WorkflowState.FAILED, step.id, {"error": message})
                return WorkflowResult(
                    run_id=run_id,
                    state=WorkflowState.FAILED,
                    context=context,
                    error=message,
                    failed_step=step.id,
                )

            context = context.model_copy(update={step.field: output})
            await self._record_output(listener, run_id, step.id, output)

        log.info(f"[{self.id}:{run_id}] completed")
        await self._notify(
            listener,
            run_id,
            WorkflowState.COMPLETED,
            "",
            {"output": context.model_dump(mode="json", by_alias=True)},
        )
        return WorkflowResult(run_id=run_id, state=WorkflowState.COMPLETED, context=context)
