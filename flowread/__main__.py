from flowread.app import main

main()
