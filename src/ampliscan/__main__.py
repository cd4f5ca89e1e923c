from ampliscan.cli import cli

cli(prog_name="ampliscan")
