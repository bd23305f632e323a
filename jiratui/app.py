"""Main application object.

DailyReportApp owns the state and processes messages one at a time, in
delivery order. Anything slow (remote calls, polling waits) runs as a
command through the runner and comes back as a message.
"""

from __future__ import annotations

import logging
import queue
import shlex
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from jirareport.config import Settings
from jirareport.errors import ApiError
from jirareport.worklogs import format_seconds

from .actions import (
    Action,
    ActionContext,
    ActionExecutor,
    ChangeStatusAction,
    CopyAction,
    CopyFormat,
    LogTimeAction,
    OpenURLAction,
    VerificationTimeout,
    build_action_context,
)
from .actions.helpers import save_state_snapshot
from .messages import (
    ActionCompleted,
    ActionFailed,
    ActionStarted,
    Command,
    DelayedRefresh,
    KeyInput,
    LoadFailed,
    Quit,
    RefreshPolling,
    RefreshTimeout,
    RefreshVerified,
    StatusMessage,
    TasksLoaded,
    WorklogsLoaded,
)
from .refresh import Poller, RefreshConfig, get_verifier
from .services.clients import Clients
from .services.loader import load_tasks_command, load_worklogs_command
from .state import TASK_PANELS, ActionResult, ActionState, ActionStatus, AppState, PanelType, RefreshStrategy
from .utils.async_tasks import run_async
from .utils.logging import log

Runner = Callable[[Command, Callable[[Any], None]], Any]

VIEW_KEYS = {
    "1": PanelType.REPORT,
    "2": PanelType.TODO,
    "3": PanelType.PROCESSING,
    "4": PanelType.TIMELOG,
}

COPY_KEYS = {
    "c": CopyFormat.KEY,
    "cu": CopyFormat.URL,
    "cf": CopyFormat.FORMATTED,
    "cm": CopyFormat.MARKDOWN,
}

HELP_TEXT = (
    "r refresh | o open | c/cu/cf/cm copy key/url/formatted/markdown | "
    "t transitions | s <transition-id> <status> | l <time> [date] [description] | "
    "h history | 1-4 view | j/k move | q quit"
)


class DailyReportApp:
    """Message loop for the daily report."""

    def __init__(
        self,
        settings: Settings,
        clients: Optional[Clients] = None,
        runner: Runner = run_async,
        sleep: Callable[[float], None] = time.sleep,
        refresh_config: Optional[RefreshConfig] = None,
        output: Callable[[str], None] = print,
    ):
        self.settings = settings
        self.clients = clients or Clients()
        self.state = AppState()
        self.executor = ActionExecutor()
        self.refresh_config = refresh_config or RefreshConfig.from_settings(settings)
        self.poller: Optional[Poller] = None
        # Outcome of the most recently finished action
        self.last_action: Optional[ActionState] = None
        self.running = False
        self.queue: "queue.Queue[Any]" = queue.Queue()
        self._runner = runner
        self._sleep = sleep
        self._output = output
        # Per in-flight action: the context captured at trigger time and the start time
        self._contexts: Dict[Action, ActionContext] = {}
        self._started: Dict[Action, datetime] = {}
        self._handlers = {
            ActionStarted: self._on_action_started,
            ActionCompleted: self._on_action_completed,
            ActionFailed: self._on_action_failed,
            RefreshPolling: self._on_refresh_polling,
            RefreshVerified: self._on_refresh_verified,
            RefreshTimeout: self._on_refresh_timeout,
            DelayedRefresh: self._on_delayed_refresh,
            TasksLoaded: self._on_tasks_loaded,
            WorklogsLoaded: self._on_worklogs_loaded,
            LoadFailed: self._on_load_failed,
            StatusMessage: self._on_status_message,
            KeyInput: self._on_key_input,
            Quit: self._on_quit,
        }

    # ------------------------------------------------------------------
    # Loop plumbing
    # ------------------------------------------------------------------

    def post(self, message: Any) -> None:
        """Queue a message for the loop. Safe from any thread."""
        self.queue.put(message)

    def dispatch(self, command: Command) -> None:
        self._runner(command, self.post)

    def handle(self, message: Any) -> None:
        handler = self._handlers.get(type(message))
        if handler is None:
            log(f"Ignoring unknown message {message!r}", logging.WARNING)
            return
        previous = self.state.status_message
        handler(message)
        if self.state.status_message and self.state.status_message != previous:
            self._output(self.state.status_message)

    def process_pending(self) -> int:
        """Handle every queued message, including ones queued while handling."""
        handled = 0
        while True:
            try:
                message = self.queue.get_nowait()
            except queue.Empty:
                return handled
            self.handle(message)
            handled += 1

    def run(self) -> None:
        """Block handling messages until Quit."""
        self.running = True
        self.refresh()
        while self.running:
            self.handle(self.queue.get())

    def switch_view(self, panel: PanelType) -> None:
        self.state.active_panel = panel
        self._output(self.render())

    def move_selection_up(self) -> None:
        self.state.move_selection_up()
        self._output(self.render())

    def move_selection_down(self) -> None:
        self.state.move_selection_down()
        self._output(self.render())

    def history(self) -> List[ActionResult]:
        return self.executor.get_history()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def trigger(self, action: Action, extra: Optional[dict] = None) -> None:
        """Validate `action` in the background and start it if valid."""
        ctx = build_action_context(self.state, self.clients, self.settings, extra)
        self._contexts[action] = ctx
        current = ActionState(name=action.name(), status=ActionStatus.VALIDATING, task_key=ctx.task_key)
        self.state.current_action = current
        self.executor.set_current_action(current)
        log(f"{action.name()}: validating")
        self.dispatch(self.executor.execute_action(action, ctx))

    def _on_action_started(self, msg: ActionStarted) -> None:
        action = msg.action
        ctx = self._contexts.get(action)
        if ctx is None:
            ctx = build_action_context(self.state, self.clients, self.settings)
        self._started[action] = msg.start_time

        # A new snapshot replaces any stale one
        self.state.snapshot = save_state_snapshot(self.state)
        self.state = action.optimistic_update(self.state)
        current = ActionState(
            name=msg.action_name,
            status=ActionStatus.EXECUTING,
            start_time=msg.start_time,
            task_key=ctx.task_key,
        )
        self.state.current_action = current
        self.executor.set_current_action(current)
        log(f"{msg.action_name}: executing")
        self.dispatch(action.execute(ctx))

    def _finish(self, action: Any, name: str, status: ActionStatus, error: Optional[str] = None) -> None:
        """Record the outcome in history and in `last_action`."""
        start = self._started.pop(action, None) or datetime.now()
        ctx = self._contexts.pop(action, None)
        self.executor.record_result(
            ActionResult(
                name=name,
                success=status == ActionStatus.SUCCESS,
                start_time=start,
                end_time=datetime.now(),
                error=error,
            )
        )
        self.last_action = ActionState(
            name=name,
            status=status,
            start_time=start,
            message=error or "",
            progress=1.0,
            task_key=ctx.task_key if ctx else "",
        )

    def _on_action_completed(self, msg: ActionCompleted) -> None:
        action = msg.action
        self._finish(action, msg.action_name, ActionStatus.SUCCESS)
        self.state = action.on_success(self.state, msg.result)
        strategy = action.get_refresh_strategy()
        self.state.refresh_strategy = strategy
        log(f"{msg.action_name}: succeeded, refresh strategy {strategy.value}")

        if strategy == RefreshStrategy.POLLING:
            self._start_polling(action)
        elif strategy == RefreshStrategy.DELAYED:
            delay = self.settings.delayed_refresh_seconds

            def wait():
                self._sleep(delay)
                return DelayedRefresh(action_name=msg.action_name)

            self.dispatch(wait)
        elif strategy == RefreshStrategy.MANUAL:
            self.state.status_message += " (press 'r' to refresh)"
            self.executor.set_current_action(None)
        else:
            self.executor.set_current_action(None)

    def _on_action_failed(self, msg: ActionFailed) -> None:
        action = msg.action
        started = action is not None and action in self._started
        rolled_back = started and self.state.snapshot is not None
        status = ActionStatus.ROLLED_BACK if rolled_back else ActionStatus.FAILED
        self._finish(action, msg.action_name, status, str(msg.error))
        log(f"{msg.action_name}: failed: {msg.error}", logging.WARNING)
        if started:
            if rolled_back:
                log(f"{msg.action_name}: rolling back optimistic update")
            self.state = action.on_error(self.state, msg.error)
        else:
            # Rejected before any optimistic update; nothing to roll back
            self.state.status_message = f"{msg.action_name} failed: {msg.error}"
            self.state.current_action = None
        if msg.retryable:
            self.state.status_message += " (you can try again)"
        self.executor.set_current_action(None)

    # ------------------------------------------------------------------
    # Verification polling
    # ------------------------------------------------------------------

    def _start_polling(self, action: Action) -> None:
        self.poller = Poller(
            action,
            config=self.refresh_config,
            verifier=get_verifier(action),
            clients=self.clients,
            sleep=self._sleep,
        )
        current = ActionState(name=action.name(), status=ActionStatus.VERIFYING, message="Verifying...")
        self.state.current_action = current
        self.executor.set_current_action(current)
        self.state.polling_active = True
        self.dispatch(self.poller.next_poll())

    def _on_refresh_polling(self, msg: RefreshPolling) -> None:
        poller = msg.poller
        if self.state.current_action is not None:
            self.state.current_action.progress = msg.attempt / poller.config.max_attempts
            self.state.current_action.message = f"Verifying (attempt {msg.attempt})..."
        if msg.verified:
            self.post(RefreshVerified(action_name=msg.action_name, attempts=msg.attempt))
        elif poller.should_continue():
            log(f"{msg.action_name}: not visible yet after attempt {msg.attempt}, retrying")
            self.dispatch(poller.next_poll())
        else:
            self.post(RefreshTimeout(action_name=msg.action_name, attempts=msg.attempt))

    def _end_polling(self) -> None:
        self.poller = None
        self.state.polling_active = False
        self.state.current_action = None
        self.executor.set_current_action(None)

    def _on_refresh_verified(self, msg: RefreshVerified) -> None:
        log(f"{msg.action_name}: verified after {msg.attempts} attempt(s)")
        self._end_polling()
        self.refresh()

    def _on_refresh_timeout(self, msg: RefreshTimeout) -> None:
        # The change already committed remotely; nothing to roll back
        log(str(VerificationTimeout(msg.action_name, msg.attempts)), logging.WARNING)
        self._end_polling()
        self.state.status_message = f"⚠ {msg.action_name} verification timed out. Press 'r' to refresh."

    def _on_delayed_refresh(self, msg: DelayedRefresh) -> None:
        self.executor.set_current_action(None)
        self.state.current_action = None
        self.refresh()

    # ------------------------------------------------------------------
    # Data loading
    # ------------------------------------------------------------------

    def _account_id(self) -> str:
        if self.state.user is not None and self.state.user.account_id:
            return self.state.user.account_id
        return self.settings.account_id

    def refresh(self) -> None:
        """Reload tasks and worklogs from the servers."""
        if self.clients.jira is not None:
            self.state.loading = True
            self.dispatch(load_tasks_command(self.clients.jira, self.settings.username))
        if self.clients.tempo is not None and self._account_id():
            self.state.worklogs_loading = True
            self.dispatch(load_worklogs_command(self.clients.tempo, self._account_id(), self.clients.jira))

    def _on_tasks_loaded(self, msg: TasksLoaded) -> None:
        need_worklogs = self.state.user is None and not self._account_id()
        self.state.user = msg.user
        self.state.report_tasks = list(msg.report_tasks)
        self.state.todo_tasks = list(msg.todo_tasks)
        self.state.processing_tasks = list(msg.processing_tasks)
        for panel in TASK_PANELS:
            self.state.clamp_selection(panel)
        self.state.loading = False
        self.state.error = None
        self.state.last_refresh_time = datetime.now()
        self.state.status_message = (
            f"Loaded {len(msg.report_tasks)} in progress, {len(msg.todo_tasks)} todo, "
            f"{len(msg.processing_tasks)} in review"
        )
        # The account id was only known once the user loaded
        if need_worklogs and self.clients.tempo is not None and self._account_id():
            self.state.worklogs_loading = True
            self.dispatch(load_worklogs_command(self.clients.tempo, self._account_id(), self.clients.jira))

    def _on_worklogs_loaded(self, msg: WorklogsLoaded) -> None:
        self.state.worklogs = list(msg.worklogs)
        self.state.date_groups = list(msg.date_groups)
        self.state.worklogs_loading = False

    def _on_load_failed(self, msg: LoadFailed) -> None:
        if msg.what == "worklogs":
            self.state.worklogs_loading = False
        else:
            self.state.loading = False
        self.state.error = str(msg.error)
        self.state.status_message = f"Failed to load {msg.what}: {msg.error}"

    def _on_status_message(self, msg: StatusMessage) -> None:
        self.state.status_message = msg.message
        if msg.is_error:
            self.state.error = msg.message

    def _on_quit(self, msg: Quit) -> None:
        self.running = False

    # ------------------------------------------------------------------
    # Shell input
    # ------------------------------------------------------------------

    def _on_key_input(self, msg: KeyInput) -> None:
        try:
            words = shlex.split(msg.line)
        except ValueError as exc:
            self.state.status_message = f"Could not parse input: {exc}"
            return
        if not words:
            return
        cmd, args = words[0], words[1:]

        if cmd == "q":
            self.post(Quit())
        elif cmd == "r":
            self.state.status_message = "Refreshing..."
            self.refresh()
        elif cmd in VIEW_KEYS:
            self.switch_view(VIEW_KEYS[cmd])
        elif cmd == "j":
            self.move_selection_down()
        elif cmd == "k":
            self.move_selection_up()
        elif cmd == "o":
            self.trigger(OpenURLAction())
        elif cmd in COPY_KEYS:
            self.trigger(CopyAction(COPY_KEYS[cmd]))
        elif cmd == "t":
            self._show_transitions()
        elif cmd == "s":
            if len(args) < 2:
                self.state.status_message = "Usage: s <transition-id> <status>"
                return
            self.trigger(ChangeStatusAction(target_status=" ".join(args[1:]), transition_id=args[0]))
        elif cmd == "l":
            if not args:
                self.state.status_message = "Usage: l <time> [date] [description]"
                return
            date_value = args[1] if len(args) > 1 else "today"
            description = " ".join(args[2:])
            self.trigger(LogTimeAction(args[0], description=description, date_value=date_value))
        elif cmd == "h":
            self._output(self.render_history())
        elif cmd in ("?", "help"):
            self._output(HELP_TEXT)
        else:
            self.state.status_message = f"Unknown command {cmd!r}. Type ? for help."

    def _show_transitions(self) -> None:
        task = self.state.selected_task()
        if task is None or self.clients.jira is None:
            self.state.status_message = "No task selected"
            return
        jira, key = self.clients.jira, task.key

        def command():
            try:
                transitions = jira.get_transitions(key)
            except ApiError as exc:
                return StatusMessage(f"Failed to load transitions for {key}: {exc}", is_error=True)
            listing = ", ".join(f"{t.id}: {t.name} -> {t.to.name}" for t in transitions)
            return StatusMessage(f"{key} transitions: {listing or 'none'}")

        self.dispatch(command)

    # ------------------------------------------------------------------
    # Plain-text rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        panel = self.state.active_panel
        if panel == PanelType.TIMELOG:
            lines = [f"== Time log ({len(self.state.date_groups)} days) =="]
            for group in self.state.date_groups:
                lines.append(f"{group.display_date}  {format_seconds(group.total_seconds)}")
            return "\n".join(lines)

        tasks = self.state.get_current_tasks()
        selected = self.state.get_selected_index()
        lines = [f"== {panel.name.title()} ({len(tasks)}) =="]
        for i, task in enumerate(tasks):
            marker = ">" if i == selected else " "
            lines.append(f"{marker} {task.key:<12} [{task.status_name}] {task.fields.summary}")
        return "\n".join(lines)

    def render_history(self) -> str:
        results = self.history()
        if not results:
            return "No actions yet"
        lines = []
        if self.last_action is not None:
            lines.append(f"Last: {self.last_action.name} [{self.last_action.status.value}]")
        for result in results:
            outcome = "ok" if result.success else f"failed: {result.error}"
            lines.append(
                f"{result.end_time:%H:%M:%S} {result.name} ({result.duration.total_seconds():.1f}s) {outcome}"
            )
        return "\n".join(lines)
