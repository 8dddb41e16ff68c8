from graphform.cli import main

main()
