import click
from lessonbook.core.config import settings
from lessonbook.core.database import Database
from lessonbook.core.logging import setup_logging
from lessonbook.models.user import User, UserRole
from lessonbook.services.user_service import UserService
import logging

logger = logging.getLogger(__name__)


def open_session():
    database = Database(settings.database_url)
    database.connect()
    return database, database.session()


@click.group()
def cli():
    """LessonBook operator commands"""
    setup_logging()


def _set_role(email: str, role: UserRole):
    database, db = open_session()
    try:
        user = UserService().set_role(db, email, role)
        click.echo(f"✓ {user.email} is now {role.value}")
    except ValueError as e:
        click.echo(f"❌ {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        db.rollback()
        logger.error(f"CLI error: {e}")
        click.echo(f"❌ Error: {e}", err=True)
        raise SystemExit(1)
    finally:
        db.close()
        database.dispose()


@cli.command()
@click.option('--email', required=True, help='User email')
def promote(email):
    """Give a registered user the admin role"""
    _set_role(email, UserRole.ADMIN)


@cli.command()
@click.option('--email', required=True, help='User email')
def demote(email):
    """Turn an admin back into a student"""
    _set_role(email, UserRole.STUDENT)


@cli.command(name="list-admins")
def list_admins():
    """List all administrators"""
    database, db = open_session()
    try:
        admins = db.query(User).filter(User.role == UserRole.ADMIN).order_by(User.email).all()
        if not admins:
            click.echo("No admins found")
            return
        click.echo(f"\nFound {len(admins)} admins:\n")
        for user in admins:
            click.echo(f"  - {user.email} (ID: {user.id}, Name: {user.name})")
    finally:
        db.close()
        database.dispose()


if __name__ == '__main__':
    cli()
