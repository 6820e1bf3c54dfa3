from apkcfg.cli.app import main

main()
