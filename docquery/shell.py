"""Terminal chat shell: the interactive front end over the chat controller."""

import asyncio
import sys
from pathlib import Path

import structlog
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from docquery.chat.controller import ChatController
from docquery.chat.reveal import TICK_INTERVAL
from docquery.chat.scroll import ScrollTracker
from docquery.core.config import Settings, settings
from docquery.core.exceptions import RECOVERABLE_ERRORS, get_error_message
from docquery.core.redis import close_redis, init_redis
from docquery.dependencies import (
    Services,
    get_api_client,
    get_chat_controller,
    get_service_wake_up,
    get_token_store,
)
from docquery.schemas.auth_schema import LoginRequest
from docquery.schemas.chat_schema import LocalMessage
from docquery.schemas.health_schema import ServiceHealth

logger = structlog.get_logger()

HELP = """\
/login              sign in
/logout             forget stored tokens
/sessions           list recent conversations
/open ID            load a conversation
/new                start a new conversation
/docs               list documents ready for chat
/upload PATH...      upload one or more files
/use ID             toggle a document in the chat scope
/good ID, /bad ID   rate an answer
/suggest            show the next suggested question
/stats [DAYS]        usage over the last 7, 30 or 90 days
/health             backend readiness
/up N, /down N      scroll the transcript
/latest             jump to the latest message
/quit               exit"""


def configure_logging(level: int) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


class TerminalViewport:
    """Line-based window over the rendered transcript."""

    def __init__(self, client_height: int = 20) -> None:
        self.lines: list[str] = []
        self.scroll_top = 0
        self.client_height = client_height

    @property
    def scroll_height(self) -> int:
        return len(self.lines)

    def scroll_to_bottom(self) -> None:
        self.scroll_top = max(0, self.scroll_height - self.client_height)

    def scroll_by(self, delta: int) -> None:
        limit = max(0, self.scroll_height - self.client_height)
        self.scroll_top = min(max(0, self.scroll_top + delta), limit)

    def visible(self) -> list[str]:
        return self.lines[self.scroll_top : self.scroll_top + self.client_height]


def transcript_lines(messages: list[LocalMessage]) -> list[str]:
    lines: list[str] = []
    for message in messages:
        if message.is_loading:
            lines.append("assistant: thinking...")
            continue
        label = "you" if message.role == "user" else f"assistant [{message.id}]"
        body = message.displayed_content + ("▌" if message.is_streaming else "")
        first, *rest = body.splitlines() or [""]
        lines.append(f"{label}: {first}")
        lines.extend(f"    {line}" for line in rest)
        if message.sources and not message.is_streaming:
            for source in message.sources:
                page = f" p.{source.page}" if source.page is not None else ""
                lines.append(f"    - {source.document_name}{page}")
        if message.feedback:
            lines.append(f"    ({message.feedback})")
    return lines


class RichChatView:
    """ChatView rendering into a rich panel, live-updated while revealing."""

    def __init__(self, console: Console, viewport: TerminalViewport) -> None:
        self._console = console
        self._viewport = viewport
        self.tracker: ScrollTracker | None = None
        self.live: Live | None = None

    def panel(self) -> Panel:
        subtitle = None
        if self.tracker is not None and self.tracker.show_jump_to_latest:
            subtitle = "more below: /latest"
        body = Text("\n".join(self._viewport.visible()))
        return Panel(Group(body), title="docquery", subtitle=subtitle)

    def render(self, messages: list[LocalMessage]) -> None:
        self._viewport.lines = transcript_lines(messages)
        if self.live is not None:
            self.live.update(self.panel())

    def show_error(self, message: str) -> None:
        self._console.print(f"[red]{message}[/red]")

    def clear_composer(self) -> None:
        pass

    def focus_composer(self) -> None:
        pass


class ChatShell:
    """Read-eval loop mapping commands onto services and the controller."""

    def __init__(self, console: Console, services: Services) -> None:
        self._console = console
        self._services = services
        self._viewport = TerminalViewport(client_height=max(5, console.height - 6))
        self._view = RichChatView(console, self._viewport)
        self._tracker = ScrollTracker(self._viewport, threshold=2)
        self._view.tracker = self._tracker
        self.controller: ChatController = get_chat_controller(
            services.chat, view=self._view, scroll=self._tracker
        )
        self._wake_up = get_service_wake_up(services.health, on_change=self._on_health)

    def on_auth_failure(self) -> None:
        self._console.print("[yellow]Session expired. Please /login again.[/yellow]")

    def _on_health(self, state: ServiceHealth) -> None:
        if state.all_healthy:
            self._console.print("[green]Backend ready.[/green]")
        elif state.backend:
            self._console.print("[yellow]Backend up, waiting for the vector store...[/yellow]")

    async def _ask(self, prompt: str, password: bool = False) -> str:
        return await asyncio.to_thread(Prompt.ask, prompt, password=password)

    async def run(self) -> None:
        self._console.print("[bold magenta]docquery[/bold magenta]  type /help for commands")
        self._wake_up.start()
        try:
            await self._loop()
        finally:
            self._wake_up.stop()

    async def _loop(self) -> None:
        if await self._services.auth.is_authenticated():
            await self._whoami()
        while not self.controller.closed:
            line = (await self._ask("[bold]>[/bold]")).strip()
            if not line:
                continue
            try:
                if line.startswith("/"):
                    await self._command(line)
                else:
                    await self._send(line)
            except RECOVERABLE_ERRORS as exc:
                self._console.print(f"[red]{get_error_message(exc)}[/red]")

    async def _send(self, text: str) -> None:
        with Live(self._view.panel(), console=self._console, refresh_per_second=30) as live:
            self._view.live = live
            try:
                await self.controller.submit(text)
                while self.controller.is_revealing:
                    await asyncio.sleep(TICK_INTERVAL)
            finally:
                self._view.live = None

    def _show(self) -> None:
        self._console.print(self._view.panel())

    async def _whoami(self) -> None:
        user = await self._services.auth.current_user()
        self._console.print(f"Signed in as [cyan]{user.username}[/cyan] ({user.email})")

    async def _upload(self, paths: list[str]) -> None:
        results = await self._services.documents.upload_bulk([Path(p) for p in paths])
        for result in results:
            if result.document is not None:
                self._console.print(f"[green]ok[/green]  {result.filename} -> {result.document.id}")
            else:
                self._console.print(f"[red]failed[/red]  {result.filename}: {result.error}")
        uploaded = sum(result.ok for result in results)
        self._console.print(f"{uploaded}/{len(results)} uploaded")

    async def _stats(self, days: int) -> None:
        overview = await self._services.analytics.overview(days)
        stats = overview.stats
        self._console.print(
            f"Last {stats.period_days} days: {stats.documents.total} documents,"
            f" {stats.queries.total} queries, {stats.chat.sessions} chats"
            f" ({stats.chat.messages} messages)"
        )
        self._console.print(
            f"Average response {stats.queries.avg_response_time_ms:.0f} ms,"
            f" confidence {stats.queries.avg_confidence:.0%}"
        )
        peak = overview.peak_day
        if peak is not None:
            self._console.print(f"Busiest day: {peak.date} ({peak.queries} queries)")

    async def _command(self, line: str) -> None:
        command, _, arg = line.partition(" ")
        arg = arg.strip()
        match command:
            case "/help":
                self._console.print(HELP)
            case "/quit" | "/exit":
                self.controller.close()
            case "/login":
                email = await self._ask("email")
                password = await self._ask("password", password=True)
                user = await self._services.auth.login(
                    LoginRequest(email=email, password=password)
                )
                self._console.print(f"Welcome, [cyan]{user.username}[/cyan]")
            case "/logout":
                await self._services.auth.logout()
                self.controller.new_conversation()
            case "/sessions":
                page = await self._services.chat.list_sessions()
                for session in page.sessions:
                    pin = "*" if session.is_pinned else " "
                    self._console.print(
                        f"{pin}{session.id:>6}  {session.title or '(untitled)'}"
                        f"  [dim]{session.message_count} messages[/dim]"
                    )
            case "/open":
                if await self.controller.load_existing(int(arg)):
                    self._tracker.jump_to_latest()
                    self._show()
            case "/new":
                self.controller.new_conversation()
                self._console.print("New conversation.")
            case "/docs":
                selected = set(self.controller.selected_document_ids)
                for doc in await self._services.documents.list_ready_documents():
                    mark = "x" if doc.id in selected else " "
                    self._console.print(f"[{mark}] {doc.id:>6}  {doc.original_filename}")
            case "/upload":
                await self._upload(arg.split())
            case "/stats":
                await self._stats(int(arg or 30))
            case "/health":
                state = await self._wake_up.check()
                self._console.print(
                    f"backend: {'up' if state.backend else 'down'}"
                    f"  vector store: {'up' if state.milvus else 'down'}"
                )
            case "/use":
                self.controller.toggle_document(int(arg))
                self._console.print(f"Scope: {self.controller.selected_document_ids or 'all documents'}")
            case "/good" | "/bad":
                verdict = "thumbs_up" if command == "/good" else "thumbs_down"
                if await self.controller.feedback(arg, verdict):
                    self._console.print("Thanks for the feedback.")
            case "/suggest":
                self._console.print(f"[dim]Try:[/dim] {self.controller.next_suggestion()}")
            case "/up" | "/down":
                lines = int(arg or 5)
                self._viewport.scroll_by(-lines if command == "/up" else lines)
                self._tracker.on_scroll()
                self._show()
            case "/latest":
                self._tracker.jump_to_latest()
                self._show()
            case _:
                self._console.print(f"Unknown command {command}; try /help")


async def run_shell(config: Settings = settings) -> None:
    configure_logging(config.app.log_level_number)
    uses_redis = config.storage.token_backend == "redis"
    if uses_redis:
        await init_redis(config.storage.redis_url)
    console = Console()
    shell: ChatShell | None = None

    def on_auth_failure() -> None:
        if shell is not None:
            shell.on_auth_failure()

    try:
        token_store = get_token_store(config)
        async with get_api_client(token_store, on_auth_failure, config) as client:
            shell = ChatShell(console, Services(client, config))
            await shell.run()
    finally:
        if uses_redis:
            await close_redis()


def main() -> None:
    try:
        asyncio.run(run_shell())
    except (KeyboardInterrupt, EOFError):
        pass
