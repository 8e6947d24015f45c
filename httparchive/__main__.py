from httparchive.cli import app

app(prog_name="httparchive")
