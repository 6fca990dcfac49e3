from raiddad.cli import main

main()
