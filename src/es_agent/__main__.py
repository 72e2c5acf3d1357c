from es_agent.server import main

main()
