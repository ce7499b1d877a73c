from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from patient_panel.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from patient_panel.logging.init import log_summary, setup_logging
from patient_panel.models.config_models import PanelConfig
from patient_panel.services.columns import header_roles
from patient_panel.services.view_model import RecordView, ViewQuery
from patient_panel.sheets.client import build_sheet_client
from patient_panel.sheets.errors import SheetClientError
from patient_panel.sheets.reader import to_frame

"""CLI entrypoint.

- Load .env (secrets) then config/panel.yml
- --inspect-data: read the sheet once, print header, derived column roles and
  the first rows, then exit
- otherwise: serve the Flask app
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 5


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True so values in .env win over stale variables in the shell.
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Patient tracking panel backed by Google Sheets")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet header, column roles & first rows then exit")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to panel.yml")
    p.add_argument("--host", default="127.0.0.1", help="Bind address")
    p.add_argument("--port", type=int, default=5000, help="Bind port")
    return p.parse_args(argv)


def _inspect_data(cfg: PanelConfig) -> int:
    logger = setup_logging()
    try:
        sheet = build_sheet_client(cfg.sheets).read()
    except SheetClientError as e:
        logger.error(f"inspect: read failed status={e.status}: {e.message} {e.details or ''}".rstrip())
        return EXIT_FATAL
    if not sheet:
        print(f"SHEET: {cfg.sheets.tab_name} (empty)")
        return EXIT_SUCCESS

    frame = to_frame(sheet)
    roles = header_roles(sheet[0])
    print(f"SHEET: {cfg.sheets.tab_name} cols={list(frame.columns)}")
    print(f"  roles status={roles.status} last_contact={roles.last_contact} cpf={roles.identifier}")
    if not frame.empty:
        print(frame.head(INSPECT_SAMPLE_ROWS).to_string(index=False))

    page = RecordView(sheet).page(ViewQuery(per_page=max(len(sheet), 1)))
    log_summary(f"records={page.total_count} pending={page.pending_count} attended={page.attended_count}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # [] from tests must not fall back to sys.argv (pytest flags would leak in)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    # imported late: Flask is not needed for --inspect-data
    from patient_panel.web.app import create_app

    try:
        app = create_app(cfg)
    except SheetClientError as e:
        logger.error(f"sheets: {e.message} {e.details or ''}".rstrip())
        return EXIT_FATAL

    log_summary(
        f"serving host={args.host} port={args.port} tab={cfg.sheets.tab_name} mode={cfg.sheets.mode}"
    )
    app.run(host=args.host, port=args.port, debug=args.debug)
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
