from migrations.legacy_to_current.cli import app

app()
