import typer

app = typer.Typer()


@app.command()
def create_admin_user():
    from models import factory_session
    from repository.admin_user import create_admin_user, get_admin_by_username

    username = typer.prompt("username")
    email = typer.prompt("email")
    password = typer.prompt("password", hide_input=True, confirmation_prompt=True)

    with factory_session() as db:
        if get_admin_by_username(db=db, username=username) is not None:
            typer.echo(f"Admin {username} already exists")
            raise typer.Exit(code=1)
        create_admin_user(db=db, username=username, email=email, password=password)
    typer.echo(f"Admin {username} created")


@app.command()
def seed():
    from seeders.initial_seeders import initial_seeders

    initial_seeders()


@app.command()
def reset_raffle(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation"),
):
    from models import factory_session
    from repository.reset import reset_raffle

    if not yes:
        typer.confirm(
            "Delete every participant and ticket and release all references?",
            abort=True,
        )

    with factory_session() as db:
        summary = reset_raffle(db=db)
    typer.echo(
        f"Deleted {summary['participants']} participants and {summary['tickets']} "
        f"tickets, released {summary['references']} references"
    )


@app.command()
def ticket_stats():
    from models import factory_session
    from repository.ticket import get_ticket_stats

    with factory_session() as db:
        stats = get_ticket_stats(db=db)
    typer.echo(
        f"{stats['used']} of {stats['total']} ticket numbers used "
        f"({stats['percentage_used']}%), {stats['available']} available"
    )


if __name__ == "__main__":
    app()
