"""Flask CLI commands for demo data: `flask --app car_rental seed` / `reset-data`."""
import click
from flask import current_app
from flask.cli import with_appcontext

DEMO_CARS = [
    {"name": "Toyota Agya", "price": 250000, "size": "small", "image": "/static/images/agya.jpg"},
    {"name": "Honda Jazz", "price": 350000, "size": "small", "image": "/static/images/jazz.jpg"},
    {"name": "Toyota Avanza", "price": 400000, "size": "medium", "image": "/static/images/avanza.jpg"},
    {"name": "Mitsubishi Xpander", "price": 450000, "size": "medium", "image": "/static/images/xpander.jpg"},
    {"name": "Toyota Hiace", "price": 900000, "size": "large", "image": "/static/images/hiace.jpg"},
]


@click.command("seed")
@with_appcontext
def seed_command():
    """Insert demo cars when the store has none."""
    store = current_app.extensions["car_rental_store"]
    repo = current_app.extensions["car_rental"].car_repository

    if store.cars:
        click.echo(f"Store already holds {len(store.cars)} cars; nothing to seed.")
        return

    for data in DEMO_CARS:
        repo.create(dict(data))
    store.save()
    click.echo(f"Seed complete: {len(DEMO_CARS)} cars created.")


@click.command("reset-data")
@with_appcontext
def reset_data_command():
    """Clear all cars and rentals from the store."""
    store = current_app.extensions["car_rental_store"]
    store.clear()
    store.save()
    click.echo("Store has been successfully cleared.")
    click.echo("Tip: run `flask --app car_rental seed` to regenerate demo data.")


def register_commands(app):
    app.cli.add_command(seed_command)
    app.cli.add_command(reset_data_command)
