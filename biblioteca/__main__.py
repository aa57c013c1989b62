from biblioteca.main import main

main()
