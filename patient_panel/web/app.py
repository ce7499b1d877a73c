from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any

from flask import (
    Flask,
    abort,
    current_app,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from werkzeug.wrappers import Response

from ..auth.firebase import AuthError, FirebaseAuthClient
from ..auth.guard import DASHBOARD_PATH, LOGIN_PATH, guard_redirect, is_protected
from ..auth.session import SessionContext, SessionRegistry
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import PanelConfig
from ..models.notice import Notice
from ..services.edit_workflow import PanelState, RecordNotFoundError, RowBusyError
from ..services.formatting import input_type
from ..services.view_model import STATUS_FILTER_OPTIONS
from ..sheets.client import SheetClient, build_sheet_client, validate_append_request, validate_update_request
from ..sheets.errors import SheetClientError

"""Flask application: login, dashboard, edit form and the /api/sheets proxy.

Everything user specific hangs off the SessionContext resolved from the
session cookie; handlers receive it through `g.context` and never keep state
of their own.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "PanelServices",
    "create_app",
]

EXTENSION_KEY = "patient_panel"


@dataclass
class PanelServices:
    config: PanelConfig
    sheet_client: SheetClient
    auth_client: FirebaseAuthClient
    registry: SessionRegistry


def _services() -> PanelServices:
    return current_app.extensions[EXTENSION_KEY]


def _token() -> str | None:
    return request.cookies.get(_services().config.auth.cookie_name)


def _context() -> SessionContext:
    return g.context


def _loaded_state() -> PanelState:
    """Current user's PanelState, reading the sheet on first use."""
    state = _context().state
    if not state.loaded:
        state.load(_services().sheet_client)
    return state


def _int_arg(name: str) -> int | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        abort(400)


def _clear_session_cookie(response: Response) -> Response:
    response.delete_cookie(_services().config.auth.cookie_name, path="/")
    return response


def create_app(
    config: PanelConfig,
    sheet_client: SheetClient | None = None,
    auth_client: FirebaseAuthClient | None = None,
    registry: SessionRegistry | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> Flask:
    app = Flask(__name__)
    if config.secret_key:
        app.secret_key = config.secret_key
    else:
        logger.warning("FLASK_SECRET_KEY not set; using a random per-process key")
        app.secret_key = secrets.token_hex(32)

    # injected buffers and registries may be empty, hence falsy
    if error_log is None:
        error_log = ErrorLogBuffer()
    if sheet_client is None:
        sheet_client = build_sheet_client(config.sheets)
    if auth_client is None:
        auth_client = FirebaseAuthClient(config.auth.firebase_api_key, timeout=config.sheets.request_timeout)
    if registry is None:
        registry = SessionRegistry(config.ui.default_page_size, error_log=error_log)
    app.extensions[EXTENSION_KEY] = PanelServices(
        config=config,
        sheet_client=sheet_client,
        auth_client=auth_client,
        registry=registry,
    )

    @app.before_request
    def guard() -> Response | None:
        if request.endpoint == "static":
            return None
        token = _token()
        target = guard_redirect(request.path, token)
        if target is not None:
            return redirect(target)
        context = _services().registry.get(token)
        if context is None and token and is_protected(request.path):
            # cookie from a session this process does not know (restart, sign-out elsewhere)
            return _clear_session_cookie(redirect(LOGIN_PATH))
        g.context = context
        return None

    @app.context_processor
    def inject_globals() -> dict[str, Any]:
        return {"status_filter_options": STATUS_FILTER_OPTIONS, "input_type": input_type}

    @app.route("/")
    def index() -> Response:
        return redirect(DASHBOARD_PATH)

    @app.route("/login", methods=["GET", "POST"])
    def login() -> Any:
        if request.method == "GET":
            return render_template("login.html", error=None, email="")
        email = request.form.get("email", "")
        password = request.form.get("password", "")
        services = _services()
        try:
            context = services.registry.sign_in(services.auth_client, email, password)
        except AuthError as e:
            return render_template("login.html", error=e.user_message, email=email), 401
        auth_cfg = services.config.auth
        response = redirect(DASHBOARD_PATH)
        response.set_cookie(
            auth_cfg.cookie_name,
            context.token,
            max_age=auth_cfg.cookie_max_age,
            path="/",
            samesite="Lax",
            secure=auth_cfg.secure_cookies,
            httponly=True,
        )
        return response

    @app.route("/logout", methods=["POST"])
    def logout() -> Response:
        _services().registry.sign_out(_token())
        return _clear_session_cookie(redirect(LOGIN_PATH))

    @app.route("/dashboard")
    def dashboard() -> Any:
        context = _context()
        services = _services()
        state = _loaded_state()

        per_page = _int_arg("per_page")
        if per_page is not None and per_page not in services.config.ui.page_size_options:
            abort(400)
        context.query.update(
            search=request.args.get("q"),
            status_filter=request.args.get("status"),
            per_page=per_page,
            page=_int_arg("page"),
        )
        if request.args.get("clear"):
            context.query.clear_filters()

        view = state.view
        return render_template(
            "dashboard.html",
            user=context.user,
            view=view,
            page=view.page(context.query),
            query=context.query,
            state=state,
            notice=state.pop_notice(),
            page_size_options=services.config.ui.page_size_options,
        )

    @app.route("/dashboard/reload", methods=["POST"])
    def reload() -> Response:
        _context().state.load(_services().sheet_client)
        return redirect(url_for("dashboard"))

    @app.route("/dashboard/rows/<int:absolute_index>/toggle", methods=["POST"])
    def toggle_status(absolute_index: int) -> Response:
        state = _loaded_state()
        try:
            state.toggle_status(_services().sheet_client, absolute_index)
        except RecordNotFoundError:
            abort(404)
        except RowBusyError as e:
            state.notice = Notice.error(str(e))
        return redirect(url_for("dashboard"))

    @app.route("/dashboard/rows/<int:absolute_index>/edit", methods=["GET"])
    def edit(absolute_index: int) -> Any:
        state = _loaded_state()
        try:
            if state.edit is None or state.edit.absolute_index != absolute_index:
                state.open_edit(absolute_index)
        except RecordNotFoundError:
            abort(404)
        return _render_edit(state)

    @app.route("/dashboard/rows/<int:absolute_index>/edit", methods=["POST"])
    def edit_submit(absolute_index: int) -> Any:
        state = _loaded_state()
        action = request.form.get("action", "save")
        try:
            if state.edit is None or state.edit.absolute_index != absolute_index:
                state.open_edit(absolute_index)
        except RecordNotFoundError:
            abort(404)

        if action == "discard":
            state.discard()
            return redirect(url_for("dashboard"))
        if action == "reset":
            state.reset_edit()
            return redirect(url_for("edit", absolute_index=absolute_index))

        for column in range(len(state.edit.buffer)):
            value = request.form.get(f"field-{column}")
            if value is not None and value != state.edit.buffer[column]:
                state.change_field(column, value)
        try:
            notice = state.save(_services().sheet_client)
        except RowBusyError as e:
            state.notice = Notice.error(str(e))
            return _render_edit(state), 409
        if notice.is_error:
            return _render_edit(state), 502
        return redirect(url_for("dashboard"))

    def _render_edit(state: PanelState) -> str:
        return render_template(
            "edit.html",
            user=_context().user,
            state=state,
            edit_session=state.edit,
            headers=state.headers,
            roles=state.roles,
            dirty=state.is_dirty(),
            notice=state.pop_notice(),
        )

    # -- JSON proxy ------------------------------------------------------------

    def _api_context() -> SessionContext | None:
        return _services().registry.get(_token())

    @app.route("/api/sheets", methods=["GET", "POST", "PUT"])
    def api_sheets() -> Any:
        if _api_context() is None:
            return jsonify({"error": "Não autenticado"}), 401
        client = _services().sheet_client
        try:
            if request.method == "GET":
                return jsonify({"values": client.read()})
            body = request.get_json(silent=True)
            if not isinstance(body, dict):
                body = {}
            if request.method == "POST":
                records = body.get("values")
                validate_append_request(records)
                return jsonify({"success": True, "result": client.append(records)})
            row_index, values = body.get("rowIndex"), body.get("values")
            validate_update_request(row_index, values)
            return jsonify({"success": True, "result": client.update(row_index, values)})
        except SheetClientError as e:
            logger.warning(f"api {request.method} failed status={e.status}: {e.message}")
            return jsonify(e.to_payload()), e.status

    return app
