"""Demo login web server

UAA 위임 로그인을 세션 기반 로그인에 연결하는 예제 서버.
코어 플로우의 외부 협력자(웹 레이어) 역할이며, 세션은 메모리에만 저장됨.

Routes:
    GET /auth/uaa           UAA 로그인 페이지로 리디렉션
    GET /auth/uaa/callback  인증 코드 수신 → 로그인 완료 → 세션 생성
    GET /home               로그인 필요 페이지
    GET /logout             세션 삭제
"""

import asyncio
import html
import json
import logging
import os
import secrets
import threading
from http.cookies import SimpleCookie
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import parse_qs, urlparse

from rich.console import Console
from rich.panel import Panel

from uaa_auth.config import ClientConfig
from uaa_auth.exceptions import (
    ConfigError,
    ExchangeError,
    MalformedResponseError,
    ProfileFetchError,
    TransportError,
)
from uaa_auth.flows.delegated_login import DelegatedLogin
from uaa_auth.providers.uaa import UAAProvider

logger = logging.getLogger(__name__)
console = Console()

SESSION_COOKIE = "uaa_session"
DEFAULT_PORT = 3000


class SessionStore:
    """스레드 안전한 메모리 세션 저장소."""

    def __init__(self):
        self._sessions: dict[str, dict] = {}
        self._lock = threading.Lock()

    def create(self, data: dict) -> str:
        session_id = secrets.token_urlsafe(32)
        with self._lock:
            self._sessions[session_id] = dict(data)
        return session_id

    def get(self, session_id: str | None) -> dict | None:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            return dict(session) if session is not None else None

    def destroy(self, session_id: str | None) -> bool:
        if not session_id:
            return False
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def all(self) -> dict[str, dict]:
        with self._lock:
            return {sid: dict(data) for sid, data in self._sessions.items()}


def default_verify(access_token: str, refresh_token: str | None, profile: dict):
    """프로필을 그대로 identity로 사용.

    실제 앱에서는 사용자 저장소에서 찾거나 생성해야 함.
    """
    return profile


class LoginServer(ThreadingHTTPServer):
    """DelegatedLogin 과 SessionStore 를 보유하는 HTTP 서버."""

    def __init__(
        self,
        server_address: tuple[str, int],
        login: DelegatedLogin,
        store: SessionStore,
    ):
        super().__init__(server_address, LoginRequestHandler)
        self.login = login
        self.store = store


class LoginRequestHandler(BaseHTTPRequestHandler):
    """예제 서버 라우트 핸들러."""

    server: LoginServer

    def log_message(self, format, *args):
        """기본 stderr 로그 대신 logging 사용."""
        logger.debug("%s - %s", self.address_string(), format % args)

    def do_GET(self):
        parsed = urlparse(self.path)
        routes = {
            "/": self._login_page,
            "/login": self._login_page,
            "/auth/uaa": self._start_login,
            "/auth/uaa/callback": self._callback,
            "/home": self._home,
            "/logout": self._logout,
        }
        handler = routes.get(parsed.path)
        if handler is None:
            self._send_json(404, {"message": "Not Found"})
            return
        handler(parse_qs(parsed.query))

    # ── Helpers ───────────────────────────────────────

    def _session_id(self) -> str | None:
        raw = self.headers.get("Cookie")
        if not raw:
            return None
        cookie = SimpleCookie()
        cookie.load(raw)
        morsel = cookie.get(SESSION_COOKIE)
        return morsel.value if morsel else None

    def _redirect(self, location: str, cookie: str | None = None):
        self.send_response(302)
        self.send_header("Location", location)
        if cookie:
            self.send_header("Set-Cookie", cookie)
        self.end_headers()

    def _send_json(self, status: int, payload: dict):
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _send_html(self, status: int, content: str):
        body = content.encode()
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    # ── Routes ────────────────────────────────────────

    def _login_page(self, params):
        self._send_html(
            200,
            "<h1>UAA Login Demo</h1>"
            '<p><a href="/auth/uaa">Log in with Bluemix</a></p>',
        )

    def _start_login(self, params):
        self._redirect(self.server.login.authorization_url())

    def _callback(self, params):
        if "error" in params:
            logger.warning("OAuth error: %s", params["error"][0])
            self._redirect("/login")
            return

        code = params.get("code", [None])[0]
        if not code:
            logger.warning("No code in callback parameters")
            self._redirect("/login")
            return

        try:
            result = asyncio.run(self.server.login.complete_login(code))
        except (ExchangeError, ProfileFetchError) as e:
            logger.error("Login failed: %s (status %d)", e, e.status_code)
            self._send_json(401, {"message": "Unauthorized", "error": str(e)})
            return
        except (TransportError, MalformedResponseError) as e:
            logger.error("Login failed: %s", e)
            self._send_json(502, {"message": "Bad Gateway", "error": str(e)})
            return
        except Exception:
            logger.exception("Login failed with unexpected error")
            self._send_json(500, {"message": "Internal Server Error"})
            return

        if not result.succeeded:
            self._redirect("/login")
            return

        session_id = self.server.store.create({"user": result.identity})
        self._redirect(
            "/home", cookie=f"{SESSION_COOKIE}={session_id}; HttpOnly; Path=/"
        )

    def _home(self, params):
        session_id = self._session_id()
        session = self.server.store.get(session_id)
        if session is None:
            self._send_json(401, {"message": "Unauthorized"})
            return

        def pretty(value) -> str:
            return html.escape(json.dumps(value, indent=2, default=str))

        self._send_html(
            200,
            "<h1>You are authenticated!</h1>"
            "<p>Look at your session cookie in browser and your session store too.</p>"
            f"<h3>session:</h3><pre>{pretty(session)}</pre>"
            f"<h3>user:</h3><pre>{pretty(session.get('user'))}</pre>"
            f"<h3>Server-side sessions:</h3><pre>{pretty(self.server.store.all())}</pre>",
        )

    def _logout(self, params):
        self.server.store.destroy(self._session_id())
        self._redirect("/", cookie=f"{SESSION_COOKIE}=; Max-Age=0; Path=/")


def create_server(
    login: DelegatedLogin,
    host: str = "localhost",
    port: int = DEFAULT_PORT,
    store: SessionStore | None = None,
) -> LoginServer:
    """예제 서버 생성 (시작은 호출자 책임)."""
    return LoginServer((host, port), login, store or SessionStore())


def main() -> int:
    """환경변수 설정으로 예제 서버 실행."""
    logging.basicConfig(level=logging.INFO)

    try:
        config = ClientConfig.from_env()
    except ConfigError as e:
        console.print(f"[bold red]설정 오류:[/bold red] {e}")
        console.print("[dim]UAA_* 환경변수를 확인하세요.[/dim]")
        return 1

    login = DelegatedLogin(UAAProvider(config), default_verify)
    port = int(os.getenv("PORT", DEFAULT_PORT))
    server = create_server(login, port=port)

    console.print(
        Panel.fit(
            f"[bold cyan]http://localhost:{port}/auth/uaa[/bold cyan] 에서 로그인하세요.\n\n"
            f"[dim]callback: {config.callback_url}[/dim]",
            title="[AUTH] UAA Login Demo",
            border_style="cyan",
        )
    )

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        console.print("[dim]서버 종료 중...[/dim]")
    finally:
        server.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
