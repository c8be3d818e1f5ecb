from deepwork.cli import app

app()
