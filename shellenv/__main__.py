from shellenv.main import cli

cli()
