from bmk.cli import main

main()
