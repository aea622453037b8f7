from semship.cli.app import main

main()
