from facecards.interface.cli import app

app()
