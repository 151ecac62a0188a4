from modship.cli.app import main

main()
