"""
Scheduled rating check workflow.
What it does:
- fetch-ratings: looks up every requested app, one at a time, in input order;
  a failed lookup becomes a failed item instead of failing the batch
- format-results: renders the ratings report and keeps only successful records
- store-results: appends each successful record to the history store and
  reports the records that were actually written
  (no store configured -> warning, nothing stored)

And, the main purpose:
Periodic batch snapshot of Play Store ratings with a readable report.
"""


import json
from typing import Literal, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from playstore_agent.agent.memory import HistoryEntry
from playstore_agent.core.clock import parse_iso, utc_now_iso
from playstore_agent.core.logging import get_logger
from playstore_agent.tools.playstore import RatingRecord
from playstore_agent.workflow.engine import RunListener, Step, Workflow, WorkflowResult, WorkflowState

log = get_logger("workflow.rating_check")

WORKFLOW_ID = "scheduled-rating-check"
HISTORY_KEY_PREFIX = "rating_history"


class RatingLookup(Protocol):
    async def lookup(self, app_name: str) -> RatingRecord: ...


class HistoryAppender(Protocol):
    async def append(self, entry: HistoryEntry) -> None: ...


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RatingCheckInput(_WireModel):
    app_names: list[str]


class ItemSuccess(_WireModel):
    success: Literal[True] = True
    app_name: str
    data: RatingRecord


class ItemFailure(_WireModel):
    success: Literal[False] = False
    app_name: str
    error: str = Field(..., min_length=1)


ItemResult = Union[ItemSuccess, ItemFailure]


class FetchOutput(_WireModel):
    ratings: list[ItemResult]
    timestamp: str


class FormatOutput(_WireModel):
    report: str
    ratings: list[RatingRecord]


class StoreOutput(_WireModel):
    stored: int = Field(..., ge=0)
    records: list[RatingRecord] = []
    timestamp: str


class RatingCheckContext(_WireModel):
    input: RatingCheckInput
    fetch_ratings: Optional[FetchOutput] = None
    format_results: Optional[FormatOutput] = None
    store_results: Optional[StoreOutput] = None


def history_key(app_id: str, timestamp: str) -> str:
    return f"{HISTORY_KEY_PREFIX}:{app_id}:{timestamp}"


def _display_time(timestamp: str) -> str:
    try:
        return parse_iso(timestamp).strftime("%Y-%m-%d %H:%M:%S UTC")
    except ValueError:
        return timestamp


def format_report(fetched: FetchOutput) -> str:
    successes = [r for r in fetched.ratings if isinstance(r, ItemSuccess)]
    failures = [r for r in fetched.ratings if isinstance(r, ItemFailure)]

    report = f"📊 App Ratings Report - {_display_time(fetched.timestamp)}\n\n"

    if successes:
        report += "✅ Successfully Retrieved:\n\n"
        for item in successes:
            data = item.data
            report += f"📱 {data.title}\n"
            report += f"   ⭐ Rating: {data.rating}/5.0 ({data.ratings_count:,} ratings)\n"
            report += f"   💬 Reviews: {data.reviews:,}\n"
            report += f"   📥 Installs: {data.installs}\n"
            report += f"   👨‍💻 Developer: {data.developer}\n"
            report += f"   🔗 {data.url}\n\n"

    if failures:
        report += "\n❌ Failed to Retrieve:\n\n"
        for item in failures:
            report += f"   • {item.app_name}: {item.error}\n"

    return report


def build_rating_check_workflow(
    lookup: RatingLookup,
    history_store: Optional[HistoryAppender] = None,
) -> Workflow[RatingCheckContext]:

    async def fetch_ratings(ctx: RatingCheckContext) -> FetchOutput:
        results: list[ItemResult] = []
        for app_name in ctx.input.app_names:
            try:
                record = await lookup.lookup(app_name)
                results.append(ItemSuccess(app_name=app_name, data=record))
            except Exception as e:
                log.warning(f"Rating lookup failed for '{app_name}': {e}")
                results.append(ItemFailure(app_name=app_name, error=str(e) or e.__class__.__name__))
        return FetchOutput(ratings=results, timestamp=utc_now_iso())

    async def format_results(ctx: RatingCheckContext) -> FormatOutput:
        fetched = ctx.fetch_ratings
        if fetched is None:
            raise RuntimeError("fetch-ratings output missing")
        return FormatOutput(
            report=format_report(fetched),
            ratings=[r.data for r in fetched.ratings if isinstance(r, ItemSuccess)],
        )

    async def store_results(ctx: RatingCheckContext) -> StoreOutput:
        formatted = ctx.format_results
        if formatted is None:
            raise RuntimeError("format-results output missing")
        timestamp = utc_now_iso()

        if history_store is None:
            log.warning("History store is not available. Skipping historical rating storage.")
            return StoreOutput(stored=0, timestamp=timestamp)

        written: list[RatingRecord] = []
        for record in formatted.ratings:
            entry: HistoryEntry = {
                "role": "assistant",
                "content": json.dumps(record.to_wire(), ensure_ascii=False),
                "key": history_key(record.app_id, timestamp),
            }
            try:
                await history_store.append(entry)
                written.append(record)
            except Exception as e:
                log.error(f"Failed to store rating history for '{record.app_id}': {e}")
        return StoreOutput(stored=len(written), records=written, timestamp=timestamp)

    return Workflow(
        id=WORKFLOW_ID,
        context_model=RatingCheckContext,
        steps=[
            Step("fetch-ratings", WorkflowState.FETCHING, "fetch_ratings", FetchOutput, fetch_ratings),
            Step("format-results", WorkflowState.FORMATTING, "format_results", FormatOutput, format_results),
            Step("store-results", WorkflowState.STORING, "store_results", StoreOutput, store_results),
        ],
    )


async def run_rating_check(
    app_names: list[str],
    *,
    lookup: RatingLookup,
    history_store: Optional[HistoryAppender] = None,
    listener: Optional[RunListener] = None,
    run_id: Optional[str] = None,
) -> WorkflowResult[RatingCheckContext]:
    workflow = build_rating_check_workflow(lookup, history_store)
    ctx = RatingCheckContext(input=RatingCheckInput(app_names=app_names))
    return await workflow.run(ctx, run_id=run_id, listener=listener)


def summarize(result: WorkflowResult[RatingCheckContext]) -> dict:
    """Trigger-surface view of a run: the report plus the records that were written to history."""
    ctx = result.context
    formatted = ctx.format_results
    stored = ctx.store_results
    return {
        "runId": result.run_id,
        "status": result.state.value,
        "error": result.error,
        "failedStep": result.failed_step,
        "report": formatted.report if formatted else None,
        "ratings": [r.to_wire() for r in stored.records] if stored else [],
        "stored": stored.stored if stored else 0,
    }
