from modpub.cli.app import main

main()
