from leakscan.run import cli

cli()
