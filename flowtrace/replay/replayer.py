"""Replay service - replays recorded actions and captures per-step snapshots.

Steps run strictly one after another: execute the action, wait for the page
to settle, probe for a focus trap, capture the snapshot, then record the
step in the session's own ContextTracker. Nothing runs concurrently, since
parent steps depend on that exact order.
"""

import random
import string
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Union

import structlog

from ..config import Settings, get_settings
from ..recording.action_parser import parse_action
from ..recording.context_tracker import ContextTracker
from ..recording.models import Action, ActionType, StepRecord
from ..tools.playwright_tools import BrowserConfig, PlaywrightTools, create_browser_context
from ..utils.logging import LogContext, configure_from_settings
from ..utils.tokens import estimate_html_tokens
from .focus_trap import FocusTrapTester
from .models import (
    FocusTrapResult,
    ManifestStep,
    ReplayResult,
    SessionManifest,
    Snapshot,
    SnapshotFiles,
)

logger = structlog.get_logger()


class ActionExecutionError(Exception):
    """A recorded action could not be executed against the page."""

    def __init__(self, action: Action, step: int, cause: Exception):
        self.action = action
        self.step = step
        self.cause = cause
        super().__init__(f"Failed to execute {action.type.value} at step {step}: {cause}")


def generate_replay_session_id() -> str:
    """Generate a unique replay session id."""
    timestamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"replay_{timestamp}_{suffix}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class Replayer:
    """Replays a recorded session against a page and builds its manifest.

    Example:
        async with create_browser_context() as browser:
            result = await Replayer().replay(actions, browser.page)
            analysis = analyze_flows(result.manifest)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        focus_trap_tester: Optional[FocusTrapTester] = None,
    ):
        self.settings = settings or get_settings()
        self.focus_trap_tester = focus_trap_tester or FocusTrapTester(
            max_tabs=self.settings.focus_trap_max_tabs,
            max_keyboard_tabs=self.settings.focus_trap_keyboard_max_tabs,
        )
        self.log = logger.bind(component="replayer")

    async def replay(
        self,
        actions: Iterable[Union[Action, dict]],
        page: Any,
        session_id: Optional[str] = None,
    ) -> ReplayResult:
        """Replay actions in order, capturing a snapshot after each.

        Args:
            actions: Recorded actions (parsed, or raw recorder dicts)
            page: Playwright page owned by this replay for its whole duration
            session_id: Optional session id; generated when omitted

        Returns:
            ReplayResult. On failure, the snapshots and manifest steps captured
            before the failing step are kept.
        """
        actions = [a if isinstance(a, Action) else parse_action(a) for a in actions]
        session_id = session_id or generate_replay_session_id()
        tools = PlaywrightTools(page, timeout_ms=self.settings.action_timeout_ms)
        tracker = ContextTracker()

        snapshots: list[Snapshot] = []
        records: list[StepRecord] = []

        with LogContext(session_id=session_id):
            self.log.info("Starting replay session", action_count=len(actions))

            for step, action in enumerate(actions, start=1):
                self.log.info(
                    "Replaying action",
                    step=step,
                    total=len(actions),
                    action=action.type.value,
                )
                try:
                    await self.execute_action(tools, action, step)

                    if self.settings.wait_for_stability:
                        await self.wait_for_stability(tools)

                    focus_trap = None
                    if self.settings.focus_trap_enabled:
                        focus_trap = await self.focus_trap_tester.test_focus_trap(tools, step)

                    snapshot = await self.capture_snapshot(tools, step, action, focus_trap)

                except Exception as e:
                    self.log.error("Replay failed", step=step, error=str(e))
                    return ReplayResult(
                        success=False,
                        session_id=session_id,
                        snapshots=snapshots,
                        manifest=self.build_manifest(session_id, actions, records, snapshots),
                        error=str(e),
                        failed_step=step,
                    )

                record = tracker.record_action(
                    action,
                    token_estimate=estimate_html_tokens(snapshot.html_length),
                )
                snapshots.append(snapshot)
                records.append(record)

            manifest = self.build_manifest(session_id, actions, records, snapshots)
            self.log.info("Replay complete", snapshot_count=len(snapshots))

        return ReplayResult(
            success=True,
            session_id=session_id,
            snapshots=snapshots,
            manifest=manifest,
        )

    async def execute_action(self, tools: PlaywrightTools, action: Action, step: int) -> None:
        """Execute one recorded action.

        Actions that failed validation are skipped; the step is still
        probed, captured and recorded.

        Raises:
            ActionExecutionError: If the page operation fails
        """
        if not action.validation.is_valid:
            self.log.warning(
                "Invalid action, skipping",
                step=step,
                action=action.type.value,
                errors=list(action.validation.errors),
            )
            return

        try:
            if action.type == ActionType.NAVIGATE:
                await tools.goto(action.url)
            elif action.type == ActionType.CLICK:
                await tools.click(action.selector)
            elif action.type == ActionType.FILL:
                await tools.fill(action.selector, action.value or "")
            elif action.type == ActionType.SELECT:
                await tools.select_option(action.selector, action.value)
            elif action.type == ActionType.SCROLL:
                if action.position is not None:
                    await tools.scroll_to(action.position.x, action.position.y)
            elif action.type == ActionType.HOVER:
                await tools.hover(action.selector)
            else:
                self.log.warning("Unknown action type, skipping", step=step, action=action.type.value)
        except Exception as e:
            raise ActionExecutionError(action, step, e) from e

    async def wait_for_stability(self, tools: PlaywrightTools) -> None:
        """Wait for network idle, then a fixed settle delay. Never raises."""
        try:
            await tools.wait_for_load_state(
                "networkidle",
                timeout_ms=self.settings.network_idle_timeout_ms,
            )
        except Exception as e:
            self.log.warning("Page stability wait failed", error=str(e))

        await tools.wait(self.settings.settle_delay_ms)

    async def capture_snapshot(
        self,
        tools: PlaywrightTools,
        step: int,
        action: Action,
        focus_trap: Optional[FocusTrapResult] = None,
    ) -> Snapshot:
        """Capture HTML, axe context and (optionally) a screenshot for a step."""
        capture_screenshot = self.settings.capture_screenshots

        html = await tools.content()
        axe_context = await tools.axe_context()
        screenshot = await tools.screenshot() if capture_screenshot else None

        self.log.debug(
            "Snapshot captured",
            step=step,
            html_length=len(html),
            focus_trap_tested=bool(focus_trap and focus_trap.tested),
        )

        return Snapshot(
            step=step,
            action=action.type.value,
            timestamp=_now_iso(),
            files=SnapshotFiles.for_step(step, capture_screenshot),
            html=html,
            axe_context=axe_context or {},
            screenshot=screenshot,
            focus_trap_test=focus_trap,
        )

    def build_manifest(
        self,
        session_id: str,
        actions: list[Action],
        records: list[StepRecord],
        snapshots: list[Snapshot],
    ) -> SessionManifest:
        """Join step records with their snapshots into a session manifest."""
        url = next(
            (a.url for a in actions if a.type == ActionType.NAVIGATE and a.url),
            None,
        )
        return SessionManifest(
            session_id=session_id,
            url=url,
            timestamp=_now_iso(),
            steps=[
                ManifestStep.from_step(record, snapshot)
                for record, snapshot in zip(records, snapshots)
            ],
        )


async def replay_with_browser(
    actions: Iterable[Union[Action, dict]],
    browser_config: Optional[BrowserConfig] = None,
    settings: Optional[Settings] = None,
) -> ReplayResult:
    """Launch a browser, replay the actions on a fresh page, and close it.

    Logging is configured from settings first, so this is usable as an entry point.
    """
    settings = settings or get_settings()
    configure_from_settings(settings)

    async with create_browser_context(browser_config) as browser:
        return await Replayer(settings=settings).replay(actions, browser.page)
