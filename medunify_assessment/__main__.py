"""Terminal front end for the assessment chat.

Usage::

    MEDUNIFY_ACCESS_TOKEN=... python -m medunify_assessment

Type an answer, or the number of one of the offered options. Commands:
``/complete``, ``/reset``, ``/history``, ``/quit``.
"""

import asyncio
import logging

from medunify_assessment.api.client import AssessmentClient
from medunify_assessment.config.settings import settings
from medunify_assessment.exceptions import (
    AssessmentAPIError,
    InsufficientDataError,
    ProtocolViolationError,
)
from medunify_assessment.models.assessment import TerminalAssessment
from medunify_assessment.models.session import Message
from medunify_assessment.models.status import MessageRole
from medunify_assessment.services.chat_orchestrator import ChatOrchestrator, TurnOutcome
from medunify_assessment.services.history_browser import HistoryBrowser
from medunify_assessment.utils.display import (
    by_urgency,
    most_urgent,
    overall_status_label,
    truncated_summary,
    urgency_label,
)

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def print_message(message: Message) -> None:
    speaker = "You" if message.role == MessageRole.USER else "Assistant"
    print(f"\n{speaker}: {message.content}")
    if message.context_reference:
        print(f"  (from your reports: {message.context_reference})")
    for number, option in enumerate(message.options or [], 1):
        print(f"  [{number}] {option}")
    if message.assessment:
        print_assessment(message.assessment)


def print_assessment(result: TerminalAssessment) -> None:
    print(f"\n== {overall_status_label(result.overall_status)} ==")
    top = most_urgent(result.conditions)
    if top is not None:
        print(f"Most urgent: {top.name} ({urgency_label(top.urgency_level)})")
    for condition in by_urgency(result.conditions):
        print(
            f"- {condition.name}: {condition.confidence:.0f}% confidence, "
            f"urgency {urgency_label(condition.urgency_level)}"
        )
        for recommendation in condition.recommendations:
            print(f"    * {recommendation}")
    if result.lifestyle_recommendations:
        print("Lifestyle:")
        for recommendation in result.lifestyle_recommendations:
            print(f"  * {recommendation}")
    if result.follow_up_timeframe:
        print(f"Follow up: {result.follow_up_timeframe}")
    if result.summary_for_doctor:
        print(f"\nSummary for your doctor:\n{result.summary_for_doctor}")
    if result.disclaimer:
        print(f"\n{result.disclaimer}")


def report(outcome: TurnOutcome) -> None:
    if outcome.error is not None and not outcome.stale:
        print(f"\n! {outcome.detail}")


async def show_history(history: HistoryBrowser) -> None:
    sessions = await history.list()
    if history.last_error is not None:
        print(f"\n! {history.last_error.detail}")
        return
    if not sessions:
        print("\nNo past assessments.")
        return
    for summary in sessions:
        print(
            f"- {summary.started_at:%Y-%m-%d} [{summary.status.value}] "
            f"{truncated_summary(summary)}"
        )


async def chat() -> None:
    client = AssessmentClient()
    orchestrator = ChatOrchestrator(client)
    history = HistoryBrowser(client)

    await orchestrator.start()
    shown = 0

    while True:
        for message in orchestrator.messages[shown:]:
            print_message(message)
        shown = len(orchestrator.messages)

        line = (await asyncio.to_thread(input, "\n> ")).strip()
        if not line:
            continue

        try:
            if line == "/quit":
                break
            elif line == "/history":
                await show_history(history)
            elif line == "/reset":
                outcome = await orchestrator.reset()
                report(outcome)
                if outcome.ok:
                    shown = 0
            elif line == "/complete":
                report(await orchestrator.force_complete())
            else:
                last = orchestrator.messages[-1] if orchestrator.messages else None
                options = last.options if last and last.role == MessageRole.ASSISTANT else None
                if options and line.isdigit() and 1 <= int(line) <= len(options):
                    outcome = await orchestrator.select_option(options[int(line) - 1])
                else:
                    outcome = await orchestrator.send(line)
                report(outcome)
        except InsufficientDataError as e:
            print(f"\n! {e}")
        except ProtocolViolationError as e:
            print(f"\n! {e}")
        except AssessmentAPIError as e:
            print(f"\n! {e.detail}")


def run() -> None:
    logger.info(f"Starting {settings.service_name} against {settings.api_base_url}")
    try:
        asyncio.run(chat())
    except (KeyboardInterrupt, EOFError):
        pass


if __name__ == "__main__":
    run()
