"""
Command line entry point for the Library API.

Usage:
    library-api init-db [--drop-existing]
    library-api seed [--books N] [--loans N]
    library-api late-loans [--days N]
    library-api serve [--host HOST] [--port PORT] [--reload]
"""

import argparse
import logging
import os
import sys

import uvicorn

from .config import get_config, reset_config
from .database.book_repository import BookRepository
from .database.loan_repository import LoanRepository
from .database.seed import seed_database
from .database.session import get_db_manager
from .observability import configure_logging
from .services.loan_service import LoanService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="library-api", description="Library API management")
    parser.add_argument("--database-url", help="Override the configured database URL")
    commands = parser.add_subparsers(dest="command", required=True)

    init_db = commands.add_parser("init-db", help="Create the database schema")
    init_db.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating new ones",
    )

    seed = commands.add_parser("seed", help="Load generated sample data")
    seed.add_argument("--books", type=int, default=50, help="Number of books to create")
    seed.add_argument("--loans", type=int, default=100, help="Number of loans to create")
    seed.add_argument("--seed", type=int, default=42, help="Random seed")

    late = commands.add_parser("late-loans", help="List unreturned loans that are late")
    late.add_argument("--days", type=int, default=None, help="Days after which a loan is late")

    serve = commands.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default=None, help="Interface to bind")
    serve.add_argument("--port", type=int, default=None, help="Port to listen on")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    return parser


def cmd_init_db(args: argparse.Namespace) -> int:
    db_manager = get_db_manager(args.database_url)
    if not db_manager.verify_connection():
        logger.error("Failed to connect to database")
        return 1
    db_manager.init_database(drop_existing=args.drop_existing)
    return 0


def cmd_seed(args: argparse.Namespace) -> int:
    db_manager = get_db_manager(args.database_url)
    db_manager.init_database()
    with db_manager.session_scope() as session:
        result = seed_database(session, books=args.books, loans=args.loans, seed=args.seed)
    print(f"Created {result.books} books and {result.loans} loans ({result.active_loans} active)")
    return 0


def cmd_late_loans(args: argparse.Namespace) -> int:
    config = get_config()
    db_manager = get_db_manager(args.database_url)
    with db_manager.session_scope() as session:
        service = LoanService(
            LoanRepository(session),
            BookRepository(session),
            late_loan_days=config.late_loan_days,
        )
        loans = service.list_late(args.days)

    for loan in loans:
        contact = f" <{loan.customer_email}>" if loan.customer_email else ""
        print(
            f"{loan.id}\t{loan.loan_date.isoformat()}\t{loan.days_out()}d"
            f"\t{loan.isbn}\t{loan.customer}{contact}"
        )
    logger.info("%d late loans", len(loans))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    if args.database_url:
        os.environ["LIBRARY_API_DATABASE_URL"] = args.database_url
        reset_config()
    config = get_config()
    uvicorn.run(
        "library_api.main:app",
        host=args.host or config.host,
        port=args.port or config.port,
        reload=args.reload,
        log_level=config.log_level.lower(),
    )
    return 0


COMMANDS = {
    "init-db": cmd_init_db,
    "seed": cmd_seed,
    "late-loans": cmd_late_loans,
    "serve": cmd_serve,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_config())
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
