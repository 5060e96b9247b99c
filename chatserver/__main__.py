from chatserver.api.main import main

main()
