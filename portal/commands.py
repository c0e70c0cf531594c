import click
from flask.cli import with_appcontext

from models import db, User


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create all tables."""
    db.create_all()
    click.echo('Database initialised.')


@click.command('create-admin')
@click.option('--username', required=True)
@click.option('--email', required=True)
@click.option('--password', required=True, prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(['admin', 'supervisor']), default='admin', show_default=True)
@with_appcontext
def create_admin_command(username, email, password, role):
    """Create a privileged account; registration only ever makes students."""
    existing_user = User.query.filter((User.username == username) | (User.email == email.strip().lower())).first()
    if existing_user:
        raise click.ClickException('Username or email already exists')
    user = User(username=username, email=email, role=role)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    click.echo(f'Created {role} {user.username} (id {user.id}).')
