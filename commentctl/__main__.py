from commentctl.cli import main

main()
