from migrator.main import main

main()
