from spaserve.serve import main

main()
