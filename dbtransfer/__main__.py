from dbtransfer.cli.main import app

app(prog_name="dbtransfer")
