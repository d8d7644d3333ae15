from bun_docs_mcp.cli import main_cli

main_cli()
