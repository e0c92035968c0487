from lead_sourcing.cli import cli

cli()
