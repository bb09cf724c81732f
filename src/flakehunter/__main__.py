from flakehunter.cli.main import app

app()
