from gitwalk.cli.main import cli

cli()
