from ina260_exporter.entrypoint import cli

cli()
