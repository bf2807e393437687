from povsim.main import main

main()
