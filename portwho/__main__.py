from portwho.cli import main

main()
