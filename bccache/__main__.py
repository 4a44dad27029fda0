from bccache.cli.app import main

main()
