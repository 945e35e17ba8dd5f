from sascopilot.cli import app

app(prog_name="sascopilot")
