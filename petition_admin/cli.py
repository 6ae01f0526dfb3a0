"""Admin user provisioning commands.

Usage:
    petition-admin init-db
    petition-admin create --email jo@example.com --first-name Jo --last-name Public --role moderator
    petition-admin list [--role moderator]
    petition-admin disable jo@example.com
    petition-admin enable jo@example.com

The password for ``create`` is prompted for unless ``--password`` is given.
"""

import argparse
import asyncio
import getpass
import sys

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from petition_admin.core import engine, get_logger, init_models, session_scope, setup_logging
from petition_admin.models.admin_user import AdminRole
from petition_admin.schemas.admin_user import AdminUserCreate
from petition_admin.services.admin_user import AdminUserService
from petition_admin.services.policy import AdminUserValidationError

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="petition-admin", description="Manage admin users")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create the database tables")

    create = commands.add_parser("create", help="Provision an admin user")
    create.add_argument("--email", required=True)
    create.add_argument("--first-name", required=True)
    create.add_argument("--last-name", required=True)
    create.add_argument("--role", required=True, choices=[role.value for role in AdminRole])
    create.add_argument("--password", help="Prompted for when omitted")

    listing = commands.add_parser("list", help="List admin users by name")
    listing.add_argument("--role", choices=[role.value for role in AdminRole])

    for name, help_text in (("disable", "Lock an account"), ("enable", "Unlock an account")):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("email")

    return parser


async def run_command(
    args: argparse.Namespace,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> int:
    """Execute a parsed command and return the process exit code."""
    if args.command == "init-db":
        await init_models(session_maker.kw["bind"] if session_maker else None)
        print("Tables created.")
        return 0

    async with session_scope(session_maker) as session:
        service = AdminUserService(session)

        if args.command == "create":
            password = args.password or getpass.getpass("Password: ")
            try:
                user = await service.create(
                    AdminUserCreate(
                        email=args.email,
                        password=password,
                        password_confirmation=password,
                        first_name=args.first_name,
                        last_name=args.last_name,
                        role=args.role,
                    )
                )
            except AdminUserValidationError as e:
                for field, reasons in e.as_dict().items():
                    print(f"ERROR: {field}: {', '.join(reasons)}")
                return 1
            print(f"Created {user.name} <{user.email}> as {user.role}.")
            return 0

        if args.command == "list":
            if args.role:
                users = await service.list_by_role(args.role)
            else:
                users = await service.list_by_name()
            for user in users:
                flags = " [disabled]" if user.account_disabled else ""
                print(f"{user.name:<40} {user.email:<40} {user.role}{flags}")
            return 0

        user = await service.get_by_email(args.email)
        if user is None:
            print(f"ERROR: no admin user with email {args.email}")
            return 1
        await service.set_account_disabled(user, args.command == "disable")
        print(f"{user.email} {'disabled' if user.account_disabled else 'enabled'}.")
        return 0


async def _main(args: argparse.Namespace) -> int:
    try:
        return await run_command(args)
    finally:
        await engine.dispose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    logger.debug(f"Running command: {args.command}")
    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
