from medusa_mcp.server.app import main

main()
