from smolpaste.app import main

main()
